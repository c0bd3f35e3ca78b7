"""Change feed WebSocket route.

Clients connect with ``?token=<access token>`` and receive one JSON message
per committed change addressed to them, then re-fetch what they display.
"""

import asyncio

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status

from ...core.access import is_admin
from ...core.events import Subscription, change_feed
from ...core.logging import get_logger
from ..auth.dependencies import user_from_token

router = APIRouter(prefix="/events", tags=["Change Feed"])

logger = get_logger(__name__)


async def _forward(websocket: WebSocket, subscription: Subscription) -> None:
    while True:
        event = await subscription.get()
        await websocket.send_json(event.to_dict())


async def _drain(websocket: WebSocket) -> None:
    """Consume client frames until the client disconnects."""
    while True:
        await websocket.receive_text()


@router.websocket("/ws")
async def change_feed_socket(websocket: WebSocket, token: str = Query("")):
    user = user_from_token(token)
    if user is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    subscription = change_feed.subscribe(user.id, is_admin(user))
    tasks = []
    try:
        await websocket.send_json({"type": "subscribed", "profile_id": user.id})
        tasks = [
            asyncio.create_task(_forward(websocket, subscription)),
            asyncio.create_task(_drain(websocket)),
        ]
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            exc = task.exception()
            if exc is not None and not isinstance(exc, WebSocketDisconnect):
                raise exc
    except WebSocketDisconnect:
        pass
    finally:
        for task in tasks:
            task.cancel()
        change_feed.unsubscribe(subscription)
        logger.debug("Change feed client disconnected", extra={"profile_id": user.id})
