"""
Thread events WebSocket.

    WS /chat/threads/{thread_id}/events?token=<jwt>

Server → client: realtime envelopes, exactly as they travel on the thread
channel ({"event": "message.inserted" | "typing" | "message.delivered", "data": ...}).
Client → server: {"type": "typing"}; anything else is ignored.

The caller must be a participant of the thread. Refusals close the socket
with 4000 + the HTTP status of the error (4401, 4403, 4404, 4422).
Every connection opens its own RealtimeService through the RealtimeConnector
and unsubscribes when the socket goes away.
"""

import json
from logging import getLogger
from typing import Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from marketplace_chat.application.ports import (
    ChatThreadRepository,
    RealtimeConnector,
    ThreadRealtimeHandlers,
)
from marketplace_chat.application.services.realtime_sync import RealtimeSyncManager
from marketplace_chat.application.services.thread_access import ThreadAccess
from marketplace_chat.config.logging_config import CORRELATION_ID_HEADER, bind_correlation_id
from marketplace_chat.domain.exceptions import ChatError, ChatErrorCode
from marketplace_chat.infrastructure.realtime.envelope import (
    encode_message_delivered,
    encode_message_inserted,
    encode_typing,
)
from marketplace_chat.presentation.dependencies.auth import auth_service_from_websocket
from marketplace_chat.presentation.errors import websocket_close_code_for

logger = getLogger(__name__)

router = APIRouter(prefix="/chat/threads", tags=["realtime"])

TYPING_EVENT = "typing"


@router.websocket("/{thread_id}/events")
async def thread_events(websocket: WebSocket, thread_id: str) -> None:
    bind_correlation_id(websocket.headers.get(CORRELATION_ID_HEADER))
    container = websocket.app.state.dishka_container
    thread_repository = await container.get(ChatThreadRepository)
    connector = await container.get(RealtimeConnector)

    await websocket.accept()

    access = ThreadAccess(thread_repository, auth_service_from_websocket(websocket))
    try:
        authorized = await access.authorize(thread_id, ChatErrorCode.READER_MISSING)
    except ChatError as e:
        logger.info(f"[Events] Refused thread {thread_id}: {e.code.value}")
        await websocket.close(code=websocket_close_code_for(e), reason=e.message)
        return

    participant_id = authorized.identity.id
    sync = RealtimeSyncManager(connector.open())

    async def forward(envelope: str) -> None:
        try:
            await websocket.send_text(envelope)
        except (WebSocketDisconnect, RuntimeError, OSError) as e:
            # socket already gone; the receive loop ends the subscription
            logger.debug(f"[Events] Dropped event for thread {thread_id}: {e!r}")

    handlers = ThreadRealtimeHandlers(
        on_message=lambda message: forward(encode_message_inserted(message)),
        on_typing=lambda event: forward(encode_typing(event)),
        on_delivered=lambda message_id: forward(encode_message_delivered(message_id)),
    )

    try:
        subscription = await sync.subscribe(thread_id, handlers)
    except ChatError as e:
        logger.error(f"[Events] Could not subscribe to thread {thread_id}: {e.message}")
        await websocket.close(code=websocket_close_code_for(e), reason=e.message)
        return

    logger.info(f"[Events] {authorized.identity.kind} {participant_id} joined thread {thread_id}")
    async with subscription:
        try:
            while True:
                raw = await websocket.receive_text()
                if _client_event_type(raw) == TYPING_EVENT:
                    await sync.broadcast_typing(thread_id, participant_id)
        except WebSocketDisconnect:
            logger.info(f"[Events] {participant_id} left thread {thread_id}")


def _client_event_type(raw: str) -> Optional[str]:
    try:
        event = json.loads(raw)
    except json.JSONDecodeError:
        logger.debug(f"[Events] Ignored non-JSON client frame: {raw[:80]!r}")
        return None
    if not isinstance(event, dict):
        return None
    return event.get("type")
