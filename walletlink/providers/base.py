"""Shared HTTP plumbing for transfer-history providers."""

import asyncio
import logging
from typing import Any

import httpx

from walletlink.core.exceptions import APIRateLimitError, APITimeoutError, TransferSourceError
from walletlink.core.provider import ProgressCallback, TransferSource
from walletlink.models.relationship import ProgressEvent

logger = logging.getLogger(__name__)


class HTTPTransferSource(TransferSource):
    """
    Base class for REST-backed transfer sources.

    Features:
    - Shared ``httpx.AsyncClient`` created on first use
    - Minimum interval between requests across concurrent searches
    - Retries with exponential backoff on 429, 5xx and timeouts
    """

    def __init__(
        self,
        base_url: str,
        requests_per_second: float = 5.0,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the provider.

        Args:
            base_url: Base URL for the provider API.
            requests_per_second: Rate limit for requests.
            max_retries: Maximum attempts per request.
            retry_delay: Base delay between retries (exponential backoff).
            timeout: Request timeout in seconds.
            transport: Optional transport override, used by tests.
        """
        self._base_url = base_url.rstrip("/")
        self._requests_per_second = requests_per_second
        self._max_retries = max(1, max_retries)
        self._retry_delay = retry_delay
        self._timeout = timeout
        self._transport = transport
        self._request_count = 0
        self._last_request_time: float = 0
        self._lock = asyncio.Lock()
        self._client: httpx.AsyncClient | None = None

    @property
    def request_count(self) -> int:
        return self._request_count

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                headers={
                    "Accept": "application/json",
                    "User-Agent": "WalletLink/1.0",
                },
                transport=self._transport,
            )
        return self._client

    async def _rate_limit(self) -> None:
        """Apply rate limiting between requests."""
        if self._requests_per_second <= 0:
            return
        async with self._lock:
            loop = asyncio.get_running_loop()
            min_interval = 1.0 / self._requests_per_second
            elapsed = loop.time() - self._last_request_time
            if elapsed < min_interval:
                wait_time = min_interval - elapsed
                logger.debug(f"Rate limiting: waiting {wait_time:.3f}s before next request")
                await asyncio.sleep(wait_time)
            self._last_request_time = loop.time()

    async def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """
        Make a GET request with retry logic.

        Args:
            url: Absolute request URL.
            params: Query parameters.

        Returns:
            Decoded JSON response.

        Raises:
            APIRateLimitError: If rate limit is still exceeded after retries.
            APITimeoutError: If every attempt timed out.
            TransferSourceError: On any other HTTP or decoding failure.
        """
        client = await self._get_client()

        for attempt in range(self._max_retries):
            await self._rate_limit()
            last_attempt = attempt == self._max_retries - 1
            try:
                self._request_count += 1
                response = await client.get(url, params=params)

                if response.status_code == 429:
                    retry_after = float(response.headers.get("Retry-After", self._retry_delay))
                    logger.warning(f"[{self.name}] Rate limit hit (429) - retry after {retry_after}s")
                    if not last_attempt:
                        await asyncio.sleep(retry_after * (2**attempt))
                        continue
                    raise APIRateLimitError(self.name, retry_after)

                if response.status_code >= 500 and not last_attempt:
                    wait_time = self._retry_delay * (2**attempt)
                    logger.warning(
                        f"[{self.name}] Server error {response.status_code} - retrying in {wait_time:.2f}s"
                    )
                    await asyncio.sleep(wait_time)
                    continue

                response.raise_for_status()
                return response.json()

            except httpx.TimeoutException as e:
                logger.warning(f"[{self.name}] Request timeout after {self._timeout}s")
                if not last_attempt:
                    await asyncio.sleep(self._retry_delay * (2**attempt))
                    continue
                raise APITimeoutError(self.name, self._timeout) from e

            except httpx.HTTPStatusError as e:
                raise TransferSourceError(
                    f"{self.name} returned HTTP {e.response.status_code}", self.name
                ) from e

            except (httpx.HTTPError, ValueError) as e:
                raise TransferSourceError(f"{self.name} request failed: {e}", self.name) from e

        raise TransferSourceError(f"{self.name} request failed", self.name)

    async def _report(
        self, progress: ProgressCallback | None, message: str, address: str
    ) -> None:
        if progress is None:
            return
        try:
            await progress(ProgressEvent(message=message, transient=True, address=address))
        except Exception as e:
            logger.debug(f"[{self.name}] Progress callback failed: {e}")

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
