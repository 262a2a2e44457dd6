"""Custom exceptions for WalletLink."""


class WalletLinkError(Exception):
    """Base exception for all WalletLink errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or "WALLETLINK_ERROR"
        super().__init__(self.message)


class TransferSourceError(WalletLinkError):
    """Base exception for transfer-history provider failures."""

    def __init__(self, message: str, provider: str | None = None) -> None:
        self.provider = provider
        super().__init__(message, "TRANSFER_SOURCE_ERROR")


class APIRateLimitError(TransferSourceError):
    """Raised when a provider keeps answering 429 after all retries."""

    def __init__(
        self, provider: str, retry_after: float | None = None
    ) -> None:
        self.retry_after = retry_after
        message = f"Rate limit exceeded for {provider}"
        if retry_after:
            message += f". Retry after {retry_after}s"
        super().__init__(message, provider)
        self.code = "RATE_LIMIT_EXCEEDED"


class APITimeoutError(TransferSourceError):
    """Raised when API request times out."""

    def __init__(self, provider: str, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"API timeout for {provider} after {timeout}s", provider)
        self.code = "API_TIMEOUT"


class UnsupportedChainError(WalletLinkError):
    """Raised when no transfer source is registered for a chain."""

    def __init__(self, chain: str) -> None:
        self.chain = chain
        super().__init__(f"Unsupported blockchain: {chain}", "UNSUPPORTED_CHAIN")


class InvalidAddressError(WalletLinkError):
    """Raised when a seed address is rejected before the search starts."""

    def __init__(self, address: str, reason: str = "invalid address") -> None:
        self.address = address
        self.reason = reason
        super().__init__(f"{reason}: {address!r}", "INVALID_ADDRESS")


class SearchInvariantError(WalletLinkError):
    """Raised when the visited trees are structurally inconsistent."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "SEARCH_INVARIANT")

