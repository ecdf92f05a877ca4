"""
Lister and client inboxes: grouping, ordering, unread totals and filters.
"""

import asyncio
import logging
import random
import uuid

import pytest

from marketplace_chat.application.dto import ChatThreadDTO, ThreadFiltersDTO
from marketplace_chat.application.queries.inbox import ListClientInboxQuery, ListListerInboxQuery
from marketplace_chat.application.services.inbox_aggregator import (
    NO_PROPERTY_KEY,
    build_client_inbox,
    build_lister_inbox,
)
from marketplace_chat.config.settings import Config
from marketplace_chat.domain.enums import SenderType
from marketplace_chat.domain.exceptions import ChatErrorCode

from conftest import (
    BUYER_ID,
    CONTACT_ID,
    LISTER_ID,
    ORG_ID,
    OTHER_USER_ID,
    PROPERTY_ID,
    SECOND_PROPERTY_ID,
)


def _lister_inbox(world, filters=None):
    return asyncio.run(world.lister_inbox().execute(ListListerInboxQuery(filters=filters)))


def _client_inbox(world, filters=None):
    return asyncio.run(world.client_inbox().execute(ListClientInboxQuery(filters=filters)))


@pytest.fixture()
def busy_world(world):
    """
    Three buyer threads on two listings of ORG_ID:
        loft   (PROPERTY_ID):        bea (1 unread for the lister), other buyer (quiet)
        garden (SECOND_PROPERTY_ID): bea (2 unread), most recent activity
    """
    loft_bea = world.open_thread(BUYER_ID, property_id=PROPERTY_ID)
    loft_other = world.open_thread(OTHER_USER_ID, property_id=PROPERTY_ID)
    garden_bea = world.open_thread(BUYER_ID, property_id=SECOND_PROPERTY_ID)
    world.seed_message(loft_bea, SenderType.USER, BUYER_ID, body="Is the loft still available?")
    world.seed_message(garden_bea, SenderType.USER, BUYER_ID, body="Does the garden face south?")
    world.seed_message(garden_bea, SenderType.USER, BUYER_ID, body="And is there parking?")
    world.ids = {"loft_bea": loft_bea, "loft_other": loft_other, "garden_bea": garden_bea}
    return world


def _thread_dto(thread_id, created_at, property_id=None, last_message_at=None, unread=0):
    return ChatThreadDTO(
        id=thread_id,
        property={"id": property_id} if property_id else None,
        created_at=created_at,
        last_message_at=last_message_at,
        unread_count=unread,
    )


class TestListerInbox:
    def test_groups_by_listing_most_recent_first(self, busy_world):
        busy_world.act_as(user_id=LISTER_ID, org_id=ORG_ID)

        inbox = _lister_inbox(busy_world).value

        ids = busy_world.ids
        assert [g.group_key for g in inbox.groups] == [SECOND_PROPERTY_ID, PROPERTY_ID]
        assert [t.id for t in inbox.groups[1].threads] == [ids["loft_bea"], ids["loft_other"]]
        assert inbox.groups[0].property.title == "Garden house"

    def test_unread_totals(self, busy_world):
        busy_world.act_as(user_id=LISTER_ID, org_id=ORG_ID)

        inbox = _lister_inbox(busy_world).value

        assert [g.unread_count for g in inbox.groups] == [2, 1]
        assert [g.thread_count for g in inbox.groups] == [1, 2]
        assert inbox.total_unread == 3
        assert inbox.total_threads == 3

    def test_threads_carry_last_message(self, busy_world):
        busy_world.act_as(user_id=LISTER_ID, org_id=ORG_ID)

        garden = _lister_inbox(busy_world).value.groups[0].threads[0]

        assert garden.last_message.body == "And is there parking?"
        assert garden.last_message_at == garden.last_message.created_at

    def test_org_members_see_org_threads(self, world):
        world.open_thread(BUYER_ID, lister_id=OTHER_USER_ID)

        world.act_as(user_id=LISTER_ID, org_id=ORG_ID)
        assert _lister_inbox(world).value.total_threads == 1

        world.act_as(user_id=LISTER_ID)
        assert _lister_inbox(world).value.total_threads == 0

    def test_unread_only(self, busy_world):
        busy_world.act_as(user_id=LISTER_ID, org_id=ORG_ID)

        inbox = _lister_inbox(busy_world, {"unread_only": True}).value

        assert busy_world.ids["loft_other"] not in [t.id for g in inbox.groups for t in g.threads]
        assert inbox.total_threads == 2

    def test_property_filter(self, busy_world):
        busy_world.act_as(user_id=LISTER_ID, org_id=ORG_ID)

        inbox = _lister_inbox(busy_world, {"property_id": PROPERTY_ID}).value

        assert [g.group_key for g in inbox.groups] == [PROPERTY_ID]

    @pytest.mark.parametrize("search,expected", [("garden", 1), ("  BEA  ", 2), ("nobody", 0)])
    def test_search(self, busy_world, search, expected):
        busy_world.act_as(user_id=LISTER_ID, org_id=ORG_ID)
        assert _lister_inbox(busy_world, {"search": search}).value.total_threads == expected

    def test_collects_every_repository_page(self, world):
        for _ in range(25):
            world.open_thread(str(uuid.uuid4()))
        world.act_as(user_id=LISTER_ID, org_id=ORG_ID)

        inbox = _lister_inbox(world, {"page_size": 10}).value

        assert inbox.total_threads == 25

    def test_stops_at_max_pages(self, world, monkeypatch, caplog):
        monkeypatch.setattr(Config, "INBOX_MAX_PAGES", 2)
        for _ in range(25):
            world.open_thread(str(uuid.uuid4()))
        world.act_as(user_id=LISTER_ID, org_id=ORG_ID)

        with caplog.at_level(logging.WARNING, logger="marketplace_chat"):
            inbox = _lister_inbox(world, {"page_size": 10}).value

        assert inbox.total_threads == 20
        assert "Inbox truncated" in caplog.text

    @pytest.mark.parametrize(
        "filters", [{"property_id": "loft"}, {"page_size": 51}, {"page": 0}, {"unread_only": "maybe"}]
    )
    def test_invalid_filters(self, world, filters):
        world.act_as(user_id=LISTER_ID, org_id=ORG_ID)
        assert _lister_inbox(world, filters).error.code is ChatErrorCode.INVALID_FILTERS

    def test_requires_a_user(self, world):
        world.act_as(contact_id=CONTACT_ID)
        assert _lister_inbox(world).error.code is ChatErrorCode.USER_REQUIRED


class TestClientInbox:
    def test_contact_sees_own_threads_flat(self, world):
        loft = world.contact_thread(property_id=PROPERTY_ID)
        garden = world.contact_thread(property_id=SECOND_PROPERTY_ID)
        world.open_thread(BUYER_ID)
        world.seed_message(loft, SenderType.USER, LISTER_ID, body="Visit on Friday?")
        world.act_as(contact_id=CONTACT_ID)

        inbox = _client_inbox(world).value

        assert [e.thread.id for e in inbox.entries] == [loft, garden]
        assert [e.unread_count for e in inbox.entries] == [1, 0]
        assert inbox.entries[0].property.id == PROPERTY_ID
        assert inbox.total_unread == 1 and inbox.total_threads == 2

    def test_signed_in_buyer_sees_own_threads(self, busy_world):
        busy_world.act_as(user_id=BUYER_ID)

        inbox = _client_inbox(busy_world).value

        ids = busy_world.ids
        assert [e.thread.id for e in inbox.entries] == [ids["garden_bea"], ids["loft_bea"]]
        # bea's own messages are never unread for her
        assert inbox.total_unread == 0

    def test_explicit_contact_filter(self, world):
        thread_id = world.contact_thread()
        world.seed_message(thread_id, SenderType.USER, LISTER_ID)
        world.open_thread(BUYER_ID)
        world.act_as(user_id=LISTER_ID, org_id=ORG_ID)

        inbox = _client_inbox(world, {"contact_id": CONTACT_ID}).value

        assert [e.thread.id for e in inbox.entries] == [thread_id]
        assert inbox.total_unread == 1

    def test_requires_an_identity(self, world):
        world.act_as(org_id=ORG_ID)
        assert _client_inbox(world).error.code is ChatErrorCode.USER_REQUIRED


class TestAggregationDeterminism:
    """The aggregator output depends only on the set of threads, never on their order."""

    def _threads(self):
        ids = sorted(str(uuid.UUID(int=n)) for n in range(1, 9))
        return [
            _thread_dto(ids[0], "2025-01-01T10:00:00Z", PROPERTY_ID, "2025-01-03T10:00:00Z", 2),
            _thread_dto(ids[1], "2025-01-01T10:00:00Z", PROPERTY_ID),
            _thread_dto(ids[2], "2025-01-01T10:00:00Z", SECOND_PROPERTY_ID, "2025-01-03T10:00:00Z", 1),
            _thread_dto(ids[3], "2025-01-02T10:00:00Z", SECOND_PROPERTY_ID),
            _thread_dto(ids[4], "2025-01-01T10:00:00Z"),
            _thread_dto(ids[5], "2025-01-01T10:00:00Z"),
            _thread_dto(ids[6], "2025-01-04T10:00:00Z", None, None, 4),
            _thread_dto(ids[7], "2025-01-01T09:00:00Z", OTHER_USER_ID),
        ]

    def test_lister_inbox_is_order_independent(self):
        threads = self._threads()
        expected = build_lister_inbox(threads)
        rng = random.Random(7)
        for _ in range(10):
            shuffled = list(threads)
            rng.shuffle(shuffled)
            assert build_lister_inbox(shuffled) == expected

    def test_client_inbox_is_order_independent(self):
        threads = self._threads()
        expected = build_client_inbox(threads)
        assert build_client_inbox(list(reversed(threads))) == expected

    def test_group_order_and_ties(self):
        threads = self._threads()
        inbox = build_lister_inbox(threads)

        # both listing groups peak at 2025-01-03; ties go to the smaller key
        assert [g.group_key for g in inbox.groups] == [
            NO_PROPERTY_KEY,
            PROPERTY_ID,
            SECOND_PROPERTY_ID,
            OTHER_USER_ID,
        ]
        no_property = inbox.groups[0]
        assert [t.id for t in no_property.threads] == [threads[6].id, threads[4].id, threads[5].id]
        assert no_property.property is None
        assert inbox.total_unread == 7
        assert inbox.total_threads == 8

    def test_threads_without_messages_sort_by_creation(self):
        inbox = build_client_inbox(self._threads())
        # last_message_at wins over created_at, equal activity falls back to id
        assert [e.thread.id for e in inbox.entries][:3] == [
            self._threads()[6].id,
            self._threads()[0].id,
            self._threads()[2].id,
        ]


class TestRepositoryPageOrder:
    def test_threads_without_messages_come_last(self, world):
        quiet = world.open_thread(OTHER_USER_ID)
        active = world.open_thread(BUYER_ID, property_id=SECOND_PROPERTY_ID)
        world.seed_message(active, SenderType.USER, BUYER_ID)
        newest = world.open_thread(BUYER_ID)

        page = asyncio.run(world.threads.list_for_lister(ThreadFiltersDTO(), LISTER_ID, ORG_ID))

        assert [t.id for t in page.items] == [active, newest, quiet]


class TestPerspectiveFilter:
    @pytest.mark.parametrize("perspective", ["lister", "client"])
    def test_accepted_and_ignored_by_the_lister_inbox(self, busy_world, perspective):
        busy_world.act_as(user_id=LISTER_ID, org_id=ORG_ID)

        plain = _lister_inbox(busy_world).value
        with_perspective = _lister_inbox(busy_world, {"perspective": perspective}).value

        assert with_perspective == plain

    def test_unknown_perspective_is_rejected(self, world):
        world.act_as(user_id=LISTER_ID, org_id=ORG_ID)
        assert _lister_inbox(world, {"perspective": "admin"}).error.code is ChatErrorCode.INVALID_FILTERS
