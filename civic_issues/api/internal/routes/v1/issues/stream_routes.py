"""
Live views over the issue store.

Each socket owns exactly one subscription and releases it when the socket
goes away, whichever side closes first.
"""

# Standard library imports
import asyncio
from contextlib import suppress

# Third-party imports
from fastapi import APIRouter, Depends, WebSocket, status
from starlette.websockets import WebSocketState

# Local application imports
from civic_issues.core.monitoring.logging import get_contextual_logger
from civic_issues.dependancies.common import get_issue_store
from civic_issues.models.issues.issue import IssueCategory
from civic_issues.schemas.issues.issue_schemas import (
    IssueChangeMessage,
    IssueDocument,
    IssueSnapshotMessage,
    StreamErrorMessage,
)
from civic_issues.services.issues.aggregation import IssueFeedState, apply_snapshot, with_category_filter
from civic_issues.services.issues.exceptions import IssueError
from civic_issues.services.issues.store import IssueStore
from civic_issues.services.issues.subscriptions import Subscription

router = APIRouter(prefix="/issues", tags=["Streams"])


async def _drain_until_disconnect(websocket: WebSocket) -> None:
    # Clients do not send anything meaningful; we only watch for the close
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


async def _serve(websocket: WebSocket, subscription: Subscription) -> None:
    receive_task = asyncio.create_task(_drain_until_disconnect(websocket))
    closed_task = asyncio.create_task(subscription.wait_closed())
    try:
        await asyncio.wait({receive_task, closed_task}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for task in (receive_task, closed_task):
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task
        await subscription.unsubscribe()

    if websocket.client_state == WebSocketState.CONNECTED:
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR)


def _error_sender(websocket: WebSocket):
    async def send_error(error: IssueError) -> None:
        message = StreamErrorMessage(code=error.code, message=error.message)
        await websocket.send_json(message.model_dump(mode="json", by_alias=True))

    return send_error


@router.websocket("/stream")
async def stream_issues(
    websocket: WebSocket,
    category: IssueCategory | None = None,
    store: IssueStore = Depends(get_issue_store),
):
    """Push the (optionally filtered) issue list and overall stats on every change"""
    await websocket.accept()
    logger = get_contextual_logger(__name__, stream="issues", category=category.value if category else "all")
    state = with_category_filter(IssueFeedState(), category)

    async def send_snapshot(issues: list[IssueDocument]) -> None:
        nonlocal state
        state = apply_snapshot(state, issues)
        message = IssueSnapshotMessage(issues=list(state.visible), stats=state.stats)
        await websocket.send_json(message.model_dump(mode="json", by_alias=True))

    subscription = await store.subscribe_collection(send_snapshot, _error_sender(websocket))
    logger.debug("Stream opened")
    await _serve(websocket, subscription)
    logger.debug("Stream closed")


@router.websocket("/{issue_id}/stream")
async def stream_issue(
    websocket: WebSocket,
    issue_id: str,
    store: IssueStore = Depends(get_issue_store),
):
    """Push one issue every time it changes"""
    await websocket.accept()

    async def send_issue(issue: IssueDocument) -> None:
        message = IssueChangeMessage(issue=issue)
        await websocket.send_json(message.model_dump(mode="json", by_alias=True))

    subscription = await store.subscribe_document(issue_id, send_issue, _error_sender(websocket))
    await _serve(websocket, subscription)
