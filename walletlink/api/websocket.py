"""Streaming relationship checks over a WebSocket."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from walletlink.api.dependencies import get_search_service
from walletlink.core.exceptions import InvalidAddressError, WalletLinkError
from walletlink.models.relationship import ProgressEvent, RelationshipRequest
from walletlink.services.conclusion import build_conclusion
from walletlink.services.relationship_search import RelationshipSearchService

logger = logging.getLogger(__name__)

ws_router = APIRouter(tags=["relationship"])

CHECK_EVENT = "check-relationship"


async def _send(websocket: WebSocket, event: str, data: Any) -> None:
    await websocket.send_json({"event": event, "data": data})


@ws_router.websocket("/ws/relationship")
async def relationship_socket(
    websocket: WebSocket,
    search: Annotated[RelationshipSearchService, Depends(get_search_service)],
) -> None:
    """
    Each message ``{"address_a", "address_b", "max_hops"}`` starts a search.

    The server answers with any number of ``progress`` events followed by
    exactly one ``conclusion`` or ``error`` event, then waits for the next
    request on the same socket.
    """
    await websocket.accept()

    async def report(event: ProgressEvent) -> None:
        await _send(websocket, "progress", event.model_dump(mode="json", exclude_none=True))

    try:
        while True:
            message = await websocket.receive_json()
            if isinstance(message, dict) and message.get("event", CHECK_EVENT) != CHECK_EVENT:
                await _send(websocket, "error", {"message": f"Unknown event: {message['event']}"})
                continue

            payload = message.get("data", message) if isinstance(message, dict) else message
            try:
                request = RelationshipRequest.model_validate(payload)
                result = await search.find_relationship(
                    request.address_a,
                    request.address_b,
                    hop_budget=request.max_hops,
                    progress=report,
                )
            except ValidationError as e:
                await _send(websocket, "error", {"message": f"Invalid request: {e.error_count()} field error(s)"})
                continue
            except InvalidAddressError as e:
                logger.warning(f"Rejected relationship request: {e.message}")
                await _send(websocket, "error", {"message": e.message})
                continue
            except WalletLinkError as e:
                logger.error(f"WalletLink error: {e.message}")
                await _send(websocket, "error", {"message": e.message})
                continue
            except WebSocketDisconnect:
                raise
            except Exception as e:
                logger.exception(f"Unexpected error during relationship search: {e}")
                await _send(websocket, "error", {"message": "An unexpected error occurred during the search"})
                continue

            await _send(websocket, "conclusion", build_conclusion(result).model_dump(mode="json"))

    except WebSocketDisconnect:
        logger.debug("Relationship socket closed by client")
