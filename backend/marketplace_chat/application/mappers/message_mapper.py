"""ChatMessageDTO <-> ChatMessage"""

import copy

from marketplace_chat.application.dto.message import ChatMessageDTO
from marketplace_chat.domain.clock import (
    format_optional_timestamp,
    format_timestamp,
    parse_optional_timestamp,
    parse_timestamp,
)
from marketplace_chat.domain.entities import ChatMessage
from marketplace_chat.domain.value_objects import MessageBody, UniqueEntityID


def to_domain_message(dto: ChatMessageDTO) -> ChatMessage:
    return ChatMessage(
        id=UniqueEntityID(dto.id),
        thread_id=UniqueEntityID(dto.thread_id),
        sender_type=dto.sender_type,
        sender_id=dto.sender_id,
        body=MessageBody.from_persistence(dto.body),
        payload=copy.deepcopy(dto.payload),
        created_at=parse_timestamp(dto.created_at),
        delivered_at=parse_optional_timestamp(dto.delivered_at),
        read_at=parse_optional_timestamp(dto.read_at),
    )


def from_domain_message(message: ChatMessage) -> ChatMessageDTO:
    return ChatMessageDTO(
        id=str(message.id),
        thread_id=str(message.thread_id),
        sender_type=message.sender_type,
        sender_id=message.sender_id,
        body=message.body.value if message.body else None,
        payload=copy.deepcopy(message.payload),
        created_at=format_timestamp(message.created_at),
        delivered_at=format_optional_timestamp(message.delivered_at),
        read_at=format_optional_timestamp(message.read_at),
    )
