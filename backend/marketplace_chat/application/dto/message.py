"""Message DTOs crossing the core/storage boundary."""

from typing import Any, Optional

from pydantic import BaseModel, field_validator, model_validator

from marketplace_chat.application.dto.common import Timestamp
from marketplace_chat.domain.enums import MessageStatus, SenderType


def derive_status(delivered_at: Any, read_at: Any) -> MessageStatus:
    if read_at:
        return MessageStatus.READ
    if delivered_at:
        return MessageStatus.DELIVERED
    return MessageStatus.SENT


class ChatMessageDTO(BaseModel):
    """A persisted message. status is always recomputed from the timestamps."""

    id: str
    thread_id: str
    sender_type: SenderType
    sender_id: Optional[str] = None
    body: Optional[str] = None
    payload: Optional[dict[str, Any]] = None
    created_at: Timestamp
    delivered_at: Optional[Timestamp] = None
    read_at: Optional[Timestamp] = None
    status: MessageStatus = MessageStatus.SENT

    @field_validator("body", mode="before")
    @classmethod
    def _empty_body_is_none(cls, value: Any) -> Any:
        return value or None

    @model_validator(mode="before")
    @classmethod
    def _derive_status(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            data["status"] = derive_status(data.get("delivered_at"), data.get("read_at"))
        return data
