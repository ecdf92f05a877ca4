"""
Prisma query fragments and row mapping for the chat tables.

Kept free of Prisma imports: everything here works on plain dicts and on
any record object exposing the model attributes.
"""

from typing import Any, Iterable, Optional

from marketplace_chat.application.dto import (
    ChatMessageDTO,
    ChatParticipantDTO,
    ChatThreadDTO,
    PropertySummaryDTO,
    ThreadFiltersDTO,
)
from marketplace_chat.domain.enums import ParticipantType, SenderType

THREAD_INCLUDE: dict[str, Any] = {
    "property": True,
    "participants": {"include": {"user": True, "contact": True}},
    "messages": {"order_by": {"created_at": "desc"}, "take": 1},
}

# Threads without messages sort after every thread with one
THREAD_ORDER: list[dict[str, Any]] = [
    {"last_message_at": {"sort": "desc", "nulls": "last"}},
    {"created_at": "desc"},
    {"id": "asc"},
]


def sender_columns(sender_type: SenderType, sender_id: Optional[str]) -> dict[str, Optional[str]]:
    return {
        "sender_user_id": sender_id if sender_type is SenderType.USER else None,
        "sender_contact_id": sender_id if sender_type is SenderType.CONTACT else None,
    }


def unread_for_reader(reader_type: ParticipantType, reader_id: str) -> dict[str, Any]:
    """Unread for a reader: not read, sent by a person, and not by the reader."""
    own_column = (
        "sender_user_id" if reader_type is ParticipantType.USER else "sender_contact_id"
    )
    return {
        "read_at": None,
        "sender_type": {"in": [SenderType.USER.value, SenderType.CONTACT.value]},
        "NOT": [{"sender_type": reader_type.value, own_column: reader_id}],
    }


def _contains(text: str) -> dict[str, str]:
    return {"contains": text, "mode": "insensitive"}


def thread_listing_where(
    filters: ThreadFiltersDTO, scope: dict[str, Any], reader_type: ParticipantType, reader_id: str
) -> dict[str, Any]:
    clauses: list[dict[str, Any]] = [scope]
    if filters.property_id:
        clauses.append({"property_id": filters.property_id})
    if filters.contact_id:
        clauses.append({"contact_id": filters.contact_id})
    if filters.search:
        clauses.append(
            {
                "OR": [
                    {"property": {"is": {"title": _contains(filters.search)}}},
                    {"participants": {"some": {"user": {"is": {"full_name": _contains(filters.search)}}}}},
                    {"participants": {"some": {"contact": {"is": {"full_name": _contains(filters.search)}}}}},
                ]
            }
        )
    if filters.unread_only:
        clauses.append({"messages": {"some": unread_for_reader(reader_type, reader_id)}})
    return {"AND": clauses}


def lister_scope(user_id: str, org_id: Optional[str]) -> dict[str, Any]:
    visible: list[dict[str, Any]] = [{"participants": {"some": {"user_id": user_id}}}]
    if org_id:
        visible.append({"org_id": org_id})
    return {"OR": visible}


def contact_scope(contact_id: str, org_id: Optional[str]) -> dict[str, Any]:
    scope: dict[str, Any] = {
        "OR": [
            {"contact_id": contact_id},
            {"participants": {"some": {"contact_id": contact_id}}},
        ]
    }
    if org_id:
        scope = {"AND": [scope, {"org_id": org_id}]}
    return scope


# ==================== ROW MAPPING ====================


def message_from_record(record: Any) -> ChatMessageDTO:
    return ChatMessageDTO(
        id=record.id,
        thread_id=record.thread_id,
        sender_type=record.sender_type,
        sender_id=record.sender_user_id or record.sender_contact_id,
        body=record.body,
        payload=record.payload if isinstance(record.payload, dict) else None,
        created_at=record.created_at,
        delivered_at=record.delivered_at,
        read_at=record.read_at,
    )


def property_from_record(record: Any) -> Optional[PropertySummaryDTO]:
    if record is None:
        return None
    return PropertySummaryDTO(
        id=record.id,
        title=record.title,
        price=record.price,
        currency=record.currency,
        city=record.city,
        state=record.state,
        cover_image_url=record.cover_image_url,
        operation_type=record.operation_type,
        status=record.status,
    )


def participants_from_records(records: Iterable[Any]) -> list[ChatParticipantDTO]:
    participants = []
    for row in records:
        if row.user_id:
            profile = row.user
            participants.append(
                ChatParticipantDTO(
                    id=row.user_id,
                    type=ParticipantType.USER,
                    display_name=profile.full_name if profile else None,
                    avatar_url=profile.avatar_url if profile else None,
                    email=profile.email if profile else None,
                    phone=profile.phone if profile else None,
                )
            )
        elif row.contact_id:
            contact = row.contact
            participants.append(
                ChatParticipantDTO(
                    id=row.contact_id,
                    type=ParticipantType.CONTACT,
                    display_name=contact.full_name if contact else None,
                    email=contact.email if contact else None,
                    phone=contact.phone if contact else None,
                )
            )
    return participants


def thread_from_record(record: Any, unread_counts: Optional[dict[str, int]] = None) -> ChatThreadDTO:
    messages = record.messages or []
    return ChatThreadDTO(
        id=record.id,
        org_id=record.org_id,
        property=property_from_record(record.property),
        contact_id=record.contact_id,
        created_by=record.created_by,
        created_at=record.created_at,
        last_message_at=record.last_message_at,
        unread_count=(unread_counts or {}).get(record.id, 0),
        status=record.status,
        participants=participants_from_records(record.participants or []),
        last_message=message_from_record(messages[0]) if messages else None,
    )
