"""ChatThreadDTO <-> ChatThread, ChatParticipantDTO <-> Participant"""

from typing import Optional

from marketplace_chat.application.dto.thread import (
    ChatParticipantDTO,
    ChatThreadDTO,
    PropertySummaryDTO,
)
from marketplace_chat.application.mappers.message_mapper import (
    from_domain_message,
    to_domain_message,
)
from marketplace_chat.domain.clock import (
    format_optional_timestamp,
    format_timestamp,
    parse_optional_timestamp,
    parse_timestamp,
)
from marketplace_chat.domain.entities import ChatThread, Participant, ThreadPropertySnapshot
from marketplace_chat.domain.value_objects import UniqueEntityID


def to_domain_participant(dto: ChatParticipantDTO) -> Participant:
    return Participant(
        id=dto.id,
        type=dto.type,
        display_name=dto.display_name,
        avatar_url=dto.avatar_url,
        email=dto.email,
        phone=dto.phone,
        last_seen_at=parse_optional_timestamp(dto.last_seen_at),
    )


def from_domain_participant(participant: Participant) -> ChatParticipantDTO:
    return ChatParticipantDTO(
        id=participant.id,
        type=participant.type,
        display_name=participant.display_name,
        avatar_url=participant.avatar_url,
        email=participant.email,
        phone=participant.phone,
        last_seen_at=format_optional_timestamp(participant.last_seen_at),
    )


def _to_property(dto: Optional[PropertySummaryDTO]) -> Optional[ThreadPropertySnapshot]:
    if dto is None:
        return None
    return ThreadPropertySnapshot(**dto.model_dump())


def _from_property(snapshot: Optional[ThreadPropertySnapshot]) -> Optional[PropertySummaryDTO]:
    if snapshot is None:
        return None
    return PropertySummaryDTO(**snapshot.to_dict())


def to_domain_thread(dto: ChatThreadDTO) -> ChatThread:
    return ChatThread(
        id=UniqueEntityID(dto.id),
        org_id=dto.org_id,
        property=_to_property(dto.property),
        contact_id=dto.contact_id,
        created_by=dto.created_by,
        created_at=parse_timestamp(dto.created_at),
        last_message_at=parse_optional_timestamp(dto.last_message_at),
        unread_count=dto.unread_count,
        status=dto.status,
        last_message=to_domain_message(dto.last_message) if dto.last_message else None,
        initial_participants=[to_domain_participant(p) for p in dto.participants],
    )


def from_domain_thread(thread: ChatThread) -> ChatThreadDTO:
    return ChatThreadDTO(
        id=str(thread.id),
        org_id=thread.org_id,
        property=_from_property(thread.property),
        contact_id=thread.contact_id,
        created_by=thread.created_by,
        created_at=format_timestamp(thread.created_at),
        last_message_at=format_optional_timestamp(thread.last_message_at),
        unread_count=thread.unread_count,
        status=thread.status,
        participants=[from_domain_participant(p) for p in thread.participants],
        last_message=from_domain_message(thread.last_message) if thread.last_message else None,
    )
