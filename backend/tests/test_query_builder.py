"""
Prisma query fragments and row mapping, checked on plain record objects.
"""

from datetime import datetime, timezone
from types import SimpleNamespace

from marketplace_chat.application.dto import ThreadFiltersDTO
from marketplace_chat.domain.enums import MessageStatus, ParticipantType, SenderType, ThreadStatus
from marketplace_chat.infrastructure.persistence.query_builder import (
    contact_scope,
    lister_scope,
    message_from_record,
    participants_from_records,
    sender_columns,
    thread_from_record,
    THREAD_ORDER,
    thread_listing_where,
    unread_for_reader,
)

from conftest import BUYER_ID, CONTACT_ID, LISTER_ID, ORG_ID, PROPERTY_ID

THREAD_ID = "aaaaaaaa-aaaa-4aaa-8aaa-aaaaaaaaaaaa"
MESSAGE_ID = "cccccccc-cccc-4ccc-8ccc-cccccccccccc"
CREATED = datetime(2025, 1, 27, 12, 0, tzinfo=timezone.utc)


def _message_row(**overrides):
    row = dict(
        id=MESSAGE_ID,
        thread_id=THREAD_ID,
        sender_type="user",
        sender_user_id=BUYER_ID,
        sender_contact_id=None,
        body="Hi there",
        payload=None,
        created_at=CREATED,
        delivered_at=None,
        read_at=None,
    )
    row.update(overrides)
    return SimpleNamespace(**row)


def _thread_row(**overrides):
    row = dict(
        id=THREAD_ID,
        org_id=ORG_ID,
        property=SimpleNamespace(
            id=PROPERTY_ID,
            title="Sunny loft",
            price=250000.0,
            currency="EUR",
            city="Lisbon",
            state=None,
            cover_image_url=None,
            operation_type="sale",
            status="active",
        ),
        contact_id=None,
        created_by=BUYER_ID,
        created_at=CREATED,
        last_message_at=CREATED,
        status="open",
        participants=[
            SimpleNamespace(
                user_id=BUYER_ID,
                contact_id=None,
                user=SimpleNamespace(full_name="Bea Buyer", avatar_url=None, email=None, phone=None),
                contact=None,
            ),
            SimpleNamespace(user_id=LISTER_ID, contact_id=None, user=None, contact=None),
        ],
        messages=[_message_row()],
    )
    row.update(overrides)
    return SimpleNamespace(**row)


class TestRowMapping:
    def test_message_row(self):
        dto = message_from_record(_message_row(read_at=CREATED, payload=["not", "a", "dict"]))

        assert dto.sender_id == BUYER_ID
        assert dto.sender_type is SenderType.USER
        assert dto.created_at == "2025-01-27T12:00:00.000000Z"
        assert dto.payload is None
        assert dto.status is MessageStatus.READ

    def test_contact_sender(self):
        dto = message_from_record(
            _message_row(sender_type="contact", sender_user_id=None, sender_contact_id=CONTACT_ID)
        )
        assert dto.sender_id == CONTACT_ID

    def test_thread_row(self):
        dto = thread_from_record(_thread_row(), unread_counts={THREAD_ID: 3})

        assert dto.unread_count == 3
        assert dto.status is ThreadStatus.OPEN
        assert dto.property.title == "Sunny loft"
        assert dto.last_message.id == MESSAGE_ID
        assert [p.display_name for p in dto.participants] == ["Bea Buyer", None]

    def test_thread_row_without_messages_or_property(self):
        dto = thread_from_record(_thread_row(messages=[], property=None, participants=None))
        assert dto.unread_count == 0
        assert dto.last_message is None
        assert dto.property is None
        assert dto.participants == []

    def test_contact_participant(self):
        rows = [
            SimpleNamespace(
                user_id=None,
                contact_id=CONTACT_ID,
                user=None,
                contact=SimpleNamespace(full_name="Carla Contact", email="c@example.com", phone=None),
            )
        ]
        (participant,) = participants_from_records(rows)
        assert participant.type is ParticipantType.CONTACT
        assert participant.email == "c@example.com"


class TestQueryFragments:
    def test_sender_columns(self):
        assert sender_columns(SenderType.CONTACT, CONTACT_ID) == {
            "sender_user_id": None,
            "sender_contact_id": CONTACT_ID,
        }
        assert sender_columns(SenderType.SYSTEM, None) == {
            "sender_user_id": None,
            "sender_contact_id": None,
        }

    def test_unread_excludes_own_and_system_messages(self):
        where = unread_for_reader(ParticipantType.CONTACT, CONTACT_ID)
        assert where["read_at"] is None
        assert where["sender_type"] == {"in": ["user", "contact"]}
        assert where["NOT"] == [{"sender_type": "contact", "sender_contact_id": CONTACT_ID}]

    def test_lister_scope(self):
        assert lister_scope(LISTER_ID, None) == {"OR": [{"participants": {"some": {"user_id": LISTER_ID}}}]}
        assert {"org_id": ORG_ID} in lister_scope(LISTER_ID, ORG_ID)["OR"]

    def test_contact_scope_with_org(self):
        scope = contact_scope(CONTACT_ID, ORG_ID)
        assert scope["AND"][1] == {"org_id": ORG_ID}

    def test_listing_where_combines_filters(self):
        filters = ThreadFiltersDTO(property_id=PROPERTY_ID, search="  loft ", unread_only=True)
        scope = lister_scope(LISTER_ID, ORG_ID)

        where = thread_listing_where(filters, scope, ParticipantType.USER, LISTER_ID)

        clauses = where["AND"]
        assert clauses[0] is scope
        assert {"property_id": PROPERTY_ID} in clauses
        assert clauses[2]["OR"][0] == {
            "property": {"is": {"title": {"contains": "loft", "mode": "insensitive"}}}
        }
        assert clauses[3] == {"messages": {"some": unread_for_reader(ParticipantType.USER, LISTER_ID)}}

    def test_listing_where_without_filters(self):
        scope = contact_scope(CONTACT_ID, None)
        where = thread_listing_where(ThreadFiltersDTO(), scope, ParticipantType.CONTACT, CONTACT_ID)
        assert where == {"AND": [scope]}

    def test_thread_order_puts_threads_without_messages_last(self):
        assert THREAD_ORDER == [
            {"last_message_at": {"sort": "desc", "nulls": "last"}},
            {"created_at": "desc"},
            {"id": "asc"},
        ]
