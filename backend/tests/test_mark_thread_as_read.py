"""
MarkThreadAsRead and per-reader unread accounting.
"""

import asyncio

from marketplace_chat.application.commands.messages import MarkThreadAsReadCommand
from marketplace_chat.application.dto import ThreadFiltersDTO
from marketplace_chat.domain.enums import MessageStatus, ParticipantType, SenderType
from marketplace_chat.domain.exceptions import ChatErrorCode

from conftest import BUYER_ID, CONTACT_ID, LISTER_ID, ORG_ID, OTHER_USER_ID


def _mark_read(world, thread_id):
    return asyncio.run(
        world.mark_thread_as_read().execute(MarkThreadAsReadCommand(thread_id=thread_id))
    )


def _unread(world, thread_id, reader_type, reader_id):
    return world.store.unread_count(thread_id, reader_type, reader_id)


class TestMarkThreadAsRead:
    def test_reader_unread_drops_to_zero(self, world):
        thread_id = world.open_thread()
        world.seed_message(thread_id, SenderType.USER, LISTER_ID, body="Yes, it is")
        world.seed_message(thread_id, SenderType.USER, LISTER_ID, body="Want to visit?")
        world.seed_message(thread_id, SenderType.USER, BUYER_ID, body="Sure")
        assert _unread(world, thread_id, ParticipantType.USER, BUYER_ID) == 2

        world.act_as(user_id=BUYER_ID)
        assert _mark_read(world, thread_id).is_ok()

        assert _unread(world, thread_id, ParticipantType.USER, BUYER_ID) == 0
        # the buyer's own message is still unread for the lister
        assert _unread(world, thread_id, ParticipantType.USER, LISTER_ID) == 1

    def test_read_messages_are_delivered_and_read(self, world):
        thread_id = world.open_thread()
        first = world.seed_message(thread_id, SenderType.USER, LISTER_ID)
        second = world.seed_message(thread_id, SenderType.USER, LISTER_ID)
        world.act_as(user_id=BUYER_ID)

        _mark_read(world, thread_id)

        assert first.status is MessageStatus.READ and second.status is MessageStatus.READ
        assert first.read_at == second.read_at
        assert first.delivered_at is not None

    def test_is_idempotent(self, world):
        thread_id = world.open_thread()
        message = world.seed_message(thread_id, SenderType.USER, LISTER_ID)
        world.act_as(user_id=BUYER_ID)

        _mark_read(world, thread_id)
        read_at = message.read_at
        assert _mark_read(world, thread_id).is_ok()

        assert message.read_at == read_at

    def test_system_messages_never_count(self, world):
        thread_id = world.open_thread()
        world.seed_message(thread_id, SenderType.SYSTEM, None, body="Listing price changed")
        assert _unread(world, thread_id, ParticipantType.USER, BUYER_ID) == 0

    def test_contact_reads_lister_messages(self, world):
        thread_id = world.contact_thread()
        world.seed_message(thread_id, SenderType.USER, LISTER_ID, body="Thanks for reaching out")
        world.act_as(contact_id=CONTACT_ID)

        _mark_read(world, thread_id)

        assert _unread(world, thread_id, ParticipantType.CONTACT, CONTACT_ID) == 0

    def test_inbox_reflects_read_state(self, world):
        thread_id = world.open_thread()
        world.seed_message(thread_id, SenderType.USER, BUYER_ID)
        world.seed_message(thread_id, SenderType.USER, BUYER_ID)

        page = asyncio.run(world.threads.list_for_lister(ThreadFiltersDTO(), LISTER_ID, ORG_ID))
        assert page.items[0].unread_count == 2

        world.act_as(user_id=LISTER_ID, org_id=ORG_ID)
        _mark_read(world, thread_id)

        page = asyncio.run(world.threads.list_for_lister(ThreadFiltersDTO(), LISTER_ID, ORG_ID))
        assert page.items[0].unread_count == 0


class TestMarkThreadAsReadAccess:
    def test_non_participant(self, world):
        thread_id = world.open_thread()
        world.act_as(user_id=OTHER_USER_ID)
        assert _mark_read(world, thread_id).error.code is ChatErrorCode.ACCESS_DENIED

    def test_missing_reader(self, world):
        thread_id = world.open_thread()
        world.act_as(org_id=ORG_ID)
        assert _mark_read(world, thread_id).error.code is ChatErrorCode.READER_MISSING

    def test_nothing_changes_when_denied(self, world):
        thread_id = world.open_thread()
        message = world.seed_message(thread_id, SenderType.USER, LISTER_ID)
        world.act_as(user_id=OTHER_USER_ID)

        _mark_read(world, thread_id)

        assert message.read_at is None
