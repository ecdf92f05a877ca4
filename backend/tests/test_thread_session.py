"""
ThreadSession and ThreadMessageView: thread switching, stale responses,
optimistic sends and typing indicators.
"""

import asyncio

from marketplace_chat.application.common.result import Result
from marketplace_chat.application.dto import ChatMessageDTO, build_page
from marketplace_chat.application.ports import TypingEvent
from marketplace_chat.application.services.realtime_sync import RealtimeSyncManager
from marketplace_chat.application.services.thread_session import ThreadMessageView, ThreadSession
from marketplace_chat.domain.enums import MessageStatus, SenderType
from marketplace_chat.domain.exceptions import ChatErrorCode

from conftest import BUYER_ID, LISTER_ID, OTHER_USER_ID, SECOND_PROPERTY_ID

THREAD_A = "aaaaaaaa-aaaa-4aaa-8aaa-aaaaaaaaaaaa"
THREAD_B = "bbbbbbbb-bbbb-4bbb-8bbb-bbbbbbbbbbbb"


def _dto(thread_id, n, **overrides):
    data = {
        "id": f"{n:08d}-0000-4000-8000-000000000000",
        "thread_id": thread_id,
        "sender_type": "user",
        "sender_id": BUYER_ID,
        "body": f"message {n}",
        "created_at": f"2025-01-27T12:00:{n:02d}Z",
    }
    data.update(overrides)
    return ChatMessageDTO(**data)


class GatedListMessages:
    """ListMessages stand-in whose responses are released by the test."""

    def __init__(self, pages):
        self.pages = pages
        self.entered = {thread_id: asyncio.Event() for thread_id in pages}
        self.gates = {thread_id: asyncio.Event() for thread_id in pages}

    def release(self, thread_id):
        self.gates[thread_id].set()

    async def execute(self, query):
        self.entered[query.thread_id].set()
        await self.gates[query.thread_id].wait()
        items = self.pages[query.thread_id]
        return Result.ok(build_page(items, len(items), 1, query.page_size or 20))


def _session(world, list_messages=None, **kwargs):
    sync = RealtimeSyncManager(world.realtime)
    return ThreadSession(
        sync,
        list_messages or world.list_messages(),
        world.send_message(),
        world.mark_thread_as_read(),
        **kwargs,
    )


class TestThreadMessageView:
    def test_messages_are_unique_and_ordered(self):
        view = ThreadMessageView(THREAD_A)

        assert view.prepend_older([_dto(THREAD_A, 3), _dto(THREAD_A, 1)]) == 2
        assert view.apply_incoming(_dto(THREAD_A, 2))
        assert not view.apply_incoming(_dto(THREAD_A, 2))

        assert [m.body for m in view.messages] == ["message 1", "message 2", "message 3"]

    def test_other_threads_are_ignored(self):
        view = ThreadMessageView(THREAD_A)
        assert not view.apply_incoming(_dto(THREAD_B, 1))
        assert len(view) == 0

    def test_redelivery_upgrades_status(self):
        view = ThreadMessageView(THREAD_A)
        view.apply_incoming(_dto(THREAD_A, 1))

        read = _dto(
            THREAD_A,
            1,
            delivered_at="2025-01-27T12:01:00Z",
            read_at="2025-01-27T12:02:00Z",
        )
        view.apply_incoming(read)
        view.apply_incoming(_dto(THREAD_A, 1))

        assert view.messages[0].status is MessageStatus.READ

    def test_apply_delivered(self):
        view = ThreadMessageView(THREAD_A)
        view.apply_incoming(_dto(THREAD_A, 1))

        assert view.apply_delivered(_dto(THREAD_A, 1).id)
        assert not view.apply_delivered(_dto(THREAD_A, 1).id)
        assert view.messages[0].status is MessageStatus.DELIVERED

    def test_pending_lifecycle(self):
        view = ThreadMessageView(THREAD_A)
        pending = view.add_pending("hello")
        assert view.pending == [pending]

        assert view.confirm_pending(pending.correlation_id, _dto(THREAD_A, 1))
        assert view.pending == []
        assert _dto(THREAD_A, 1).id in view


class TestThreadSwitching:
    def test_select_loads_first_page_and_subscribes(self, world):
        thread_id = world.open_thread()
        world.seed_message(thread_id, SenderType.USER, LISTER_ID, body="Welcome")
        world.act_as(user_id=BUYER_ID)
        session = _session(world)

        assert asyncio.run(session.select_thread(thread_id))

        assert [m.body for m in session.view.messages] == ["Welcome"]
        assert world.realtime.subscribed_threads == [thread_id]

    def test_switching_keeps_one_subscription(self, world):
        first = world.open_thread()
        second = world.open_thread(property_id=SECOND_PROPERTY_ID)
        world.act_as(user_id=BUYER_ID)
        session = _session(world)

        async def scenario():
            await session.select_thread(first)
            await session.select_thread(second)

        asyncio.run(scenario())

        assert world.realtime.subscribed_threads == [second]
        assert world.realtime.unsubscribe_calls == [first]
        assert session.subscription.thread_id == second

    def test_stale_page_is_discarded(self, world):
        async def scenario():
            gated = GatedListMessages({THREAD_A: [_dto(THREAD_A, 1)], THREAD_B: [_dto(THREAD_B, 2)]})
            session = _session(world, list_messages=gated)

            select_a = asyncio.create_task(session.select_thread(THREAD_A))
            await gated.entered[THREAD_A].wait()

            gated.release(THREAD_B)
            assert await session.select_thread(THREAD_B)

            gated.release(THREAD_A)
            assert not await select_a

            assert session.selected_thread_id == THREAD_B
            assert [m.thread_id for m in session.view.messages] == [THREAD_B]
            assert world.realtime.subscribed_threads == [THREAD_B]

        asyncio.run(scenario())

    def test_events_for_previous_thread_are_ignored(self, world):
        async def scenario():
            first = world.open_thread()
            second = world.open_thread(property_id=SECOND_PROPERTY_ID)
            world.act_as(user_id=BUYER_ID)
            session = _session(world)

            await session.select_thread(first)
            first_handlers = world.realtime._handlers[first]
            await session.select_thread(second)

            await first_handlers.on_message(_dto(first, 1))
            return session

        session = asyncio.run(scenario())
        assert len(session.view) == 0

    def test_load_older(self, world):
        thread_id = world.open_thread()
        for n in range(25):
            world.seed_message(thread_id, SenderType.USER, LISTER_ID, body=f"m{n}")
        world.act_as(user_id=BUYER_ID)
        session = _session(world, page_size=10)

        async def scenario():
            await session.select_thread(thread_id)
            assert len(session.view) == 10 and session.has_more
            while session.has_more:
                await session.load_older()

        asyncio.run(scenario())

        assert len(session.view) == 25
        assert session.view.messages[0].body == "m0"
        assert not asyncio.run(session.load_older())

    def test_denied_thread_sets_last_error(self, world):
        thread_id = world.open_thread()
        world.act_as(user_id=OTHER_USER_ID)
        session = _session(world)

        assert not asyncio.run(session.select_thread(thread_id))
        assert session.last_error.code is ChatErrorCode.ACCESS_DENIED


class TestOptimisticSend:
    def test_echo_and_response_reconcile_to_one_message(self, world):
        thread_id = world.open_thread()
        world.act_as(user_id=BUYER_ID)
        session = _session(world)

        async def scenario():
            await session.select_thread(thread_id)
            return await session.send("Is parking included?")

        result = asyncio.run(scenario())

        assert result.is_ok()
        assert [m.id for m in session.view.messages] == [result.value.id]
        assert session.view.pending == []

    def test_failed_send_stays_pending_with_error(self, world):
        thread_id = world.open_thread()
        world.act_as(user_id=BUYER_ID)
        session = _session(world)

        async def scenario():
            await session.select_thread(thread_id)
            return await session.send("   ")

        result = asyncio.run(scenario())

        assert result.error.code is ChatErrorCode.MESSAGE_EMPTY
        (pending,) = session.view.pending
        assert pending.failed and pending.error.code is ChatErrorCode.MESSAGE_EMPTY
        assert len(session.view) == 0

    def test_mark_read(self, world):
        thread_id = world.open_thread()
        message = world.seed_message(thread_id, SenderType.USER, LISTER_ID)
        world.act_as(user_id=BUYER_ID)
        session = _session(world)

        async def scenario():
            await session.select_thread(thread_id)
            return await session.mark_read()

        assert asyncio.run(scenario()).is_ok()
        assert message.status is MessageStatus.READ


class TestTypingIndicator:
    def test_typing_expires_after_ttl(self, world):
        thread_id = world.open_thread()
        world.act_as(user_id=BUYER_ID)
        now = [100.0]
        session = _session(world, typing_ttl_seconds=3, clock=lambda: now[0])

        async def scenario():
            await session.select_thread(thread_id)
            await world.realtime.deliver_typing(thread_id, TypingEvent(participant_id=LISTER_ID, at=""))

        asyncio.run(scenario())

        assert session.typing_participants() == [LISTER_ID]
        now[0] += 3.5
        assert session.typing_participants() == []

    def test_own_typing_is_broadcast(self, world):
        thread_id = world.open_thread()
        world.act_as(user_id=BUYER_ID)
        session = _session(world)

        async def scenario():
            await session.select_thread(thread_id)
            await session.typing(BUYER_ID)

        asyncio.run(scenario())

        assert [e.participant_id for e in world.realtime.typing_broadcasts] == [BUYER_ID]

    def test_close_unsubscribes(self, world):
        thread_id = world.open_thread()
        world.act_as(user_id=BUYER_ID)
        session = _session(world)

        async def scenario():
            await session.select_thread(thread_id)
            await session.close()

        asyncio.run(scenario())

        assert world.realtime.subscribed_threads == []
        assert session.view is None and session.subscription is None
