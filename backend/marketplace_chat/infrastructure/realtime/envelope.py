"""
Realtime wire format.

Every event on a thread channel is one JSON envelope:
    {"event": "message.inserted", "data": {...ChatMessageDTO...}}
    {"event": "typing", "data": {"participant_id": "...", "at": "..."}}
    {"event": "message.delivered", "data": {"message_id": "..."}}
"""

import json
import logging
from typing import Any, Union

from pydantic import ValidationError

from marketplace_chat.application.dto import ChatMessageDTO
from marketplace_chat.application.ports import ThreadRealtimeHandlers, TypingEvent, invoke_handler
from marketplace_chat.application.ports.realtime_service import (
    MESSAGE_DELIVERED,
    MESSAGE_INSERTED,
    TYPING,
)

logger = logging.getLogger(__name__)

RealtimeEvent = Union[ChatMessageDTO, TypingEvent, str]


def encode_event(event: str, data: dict[str, Any]) -> str:
    return json.dumps({"event": event, "data": data}, separators=(",", ":"))


def encode_message_inserted(message: ChatMessageDTO) -> str:
    return encode_event(MESSAGE_INSERTED, message.model_dump(mode="json"))


def encode_typing(event: TypingEvent) -> str:
    return encode_event(TYPING, {"participant_id": event.participant_id, "at": event.at})


def encode_message_delivered(message_id: str) -> str:
    return encode_event(MESSAGE_DELIVERED, {"message_id": message_id})


def decode_event(raw: Union[str, bytes]) -> tuple[str, RealtimeEvent]:
    """
    Parse an envelope into (event name, typed payload).

    Raises:
        ValueError: malformed JSON, unknown event or invalid payload
    """
    try:
        envelope = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid realtime envelope: {e}") from e
    if not isinstance(envelope, dict) or not isinstance(envelope.get("data"), dict):
        raise ValueError("Realtime envelope must be an object with a data object")

    event, data = envelope.get("event"), envelope["data"]
    try:
        if event == MESSAGE_INSERTED:
            return event, ChatMessageDTO.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid {MESSAGE_INSERTED} payload: {e}") from e
    if event == TYPING:
        if not data.get("participant_id"):
            raise ValueError("typing event without participant_id")
        return event, TypingEvent(participant_id=str(data["participant_id"]), at=str(data.get("at", "")))
    if event == MESSAGE_DELIVERED:
        if not data.get("message_id"):
            raise ValueError("message.delivered event without message_id")
        return event, str(data["message_id"])
    raise ValueError(f"Unknown realtime event: {event!r}")


async def dispatch_event(
    thread_id: str, raw: Union[str, bytes], handlers: ThreadRealtimeHandlers
) -> None:
    """Decode one envelope and hand it to the matching handler."""
    try:
        event, payload = decode_event(raw)
    except ValueError as e:
        logger.warning(f"[Realtime] Dropped malformed event on thread {thread_id}: {e}")
        return

    if event == MESSAGE_INSERTED:
        if payload.thread_id != thread_id:
            return
        await invoke_handler(handlers.on_message, payload)
    elif event == TYPING:
        await invoke_handler(handlers.on_typing, payload)
    else:
        await invoke_handler(handlers.on_delivered, payload)
