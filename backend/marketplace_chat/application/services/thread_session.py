"""
Consumer-side state for the currently selected thread.

ThreadMessageView holds the visible messages of one thread: deduplicated by
id, in chronological order, plus optimistic entries for sends still in
flight. An optimistic entry is keyed by a client correlation id and is
reconciled with the persisted message by id, whether the realtime echo or the
send response arrives first.

ThreadSession drives a view: switching threads closes the previous realtime
subscription, opens the new one and loads page 1. A page that resolves after
the selection moved on is discarded.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional
from uuid import uuid4

from marketplace_chat.application.commands.messages import (
    MarkThreadAsReadCommand,
    MarkThreadAsReadHandler,
    SendMessageCommand,
    SendMessageHandler,
)
from marketplace_chat.application.common.result import Result
from marketplace_chat.application.dto import ChatMessageDTO
from marketplace_chat.application.ports import ThreadRealtimeHandlers, TypingEvent
from marketplace_chat.application.queries.messages import (
    ListMessagesHandler,
    ListMessagesQuery,
)
from marketplace_chat.application.services.realtime_sync import (
    RealtimeSyncManager,
    ThreadSubscription,
)
from marketplace_chat.config.settings import Config
from marketplace_chat.domain.clock import format_timestamp, utc_now
from marketplace_chat.domain.enums import MessageStatus
from marketplace_chat.domain.exceptions import ChatError

logger = logging.getLogger(__name__)

_STATUS_RANK = {
    MessageStatus.SENT: 0,
    MessageStatus.DELIVERED: 1,
    MessageStatus.READ: 2,
}


@dataclass
class PendingMessage:
    correlation_id: str
    body: str
    payload: Optional[dict[str, Any]] = None
    created_at: str = field(default_factory=lambda: format_timestamp(utc_now()))
    error: Optional[ChatError] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class ThreadMessageView:
    def __init__(self, thread_id: str):
        self.thread_id = thread_id
        self._messages: dict[str, ChatMessageDTO] = {}
        self._pending: dict[str, PendingMessage] = {}

    @property
    def messages(self) -> list[ChatMessageDTO]:
        return sorted(self._messages.values(), key=lambda m: (m.created_at, m.id))

    @property
    def pending(self) -> list[PendingMessage]:
        return list(self._pending.values())

    def __len__(self) -> int:
        return len(self._messages)

    def __contains__(self, message_id: str) -> bool:
        return message_id in self._messages

    def prepend_older(self, items: list[ChatMessageDTO]) -> int:
        """Merge a page of history; returns how many messages were new."""
        return sum(1 for item in items if self.apply_incoming(item))

    def apply_incoming(self, message: ChatMessageDTO) -> bool:
        """Add a message; False when it belongs elsewhere or is already shown."""
        if message.thread_id != self.thread_id:
            return False
        current = self._messages.get(message.id)
        if current is None:
            self._messages[message.id] = message
            return True
        # a redelivery may carry newer delivery/read state
        if _STATUS_RANK[message.status] > _STATUS_RANK[current.status]:
            self._messages[message.id] = message
        return False

    def apply_delivered(self, message_id: str) -> bool:
        current = self._messages.get(message_id)
        if current is None or current.delivered_at is not None:
            return False
        data = current.model_dump()
        data["delivered_at"] = format_timestamp(utc_now())
        self._messages[message_id] = ChatMessageDTO(**data)
        return True

    def add_pending(
        self,
        body: str,
        payload: Optional[dict[str, Any]] = None,
        correlation_id: Optional[str] = None,
    ) -> PendingMessage:
        pending = PendingMessage(
            correlation_id=correlation_id or str(uuid4()), body=body, payload=payload
        )
        self._pending[pending.correlation_id] = pending
        return pending

    def confirm_pending(self, correlation_id: str, message: ChatMessageDTO) -> bool:
        self._pending.pop(correlation_id, None)
        return self.apply_incoming(message)

    def fail_pending(self, correlation_id: str, error: ChatError) -> None:
        pending = self._pending.get(correlation_id)
        if pending is not None:
            pending.error = error

    def discard_pending(self, correlation_id: str) -> None:
        self._pending.pop(correlation_id, None)


class ThreadSession:
    def __init__(
        self,
        sync: RealtimeSyncManager,
        list_messages: ListMessagesHandler,
        send_message: SendMessageHandler,
        mark_thread_as_read: MarkThreadAsReadHandler,
        page_size: Optional[int] = None,
        typing_ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._sync = sync
        self._list_messages = list_messages
        self._send_message = send_message
        self._mark_thread_as_read = mark_thread_as_read
        self._page_size = page_size or Config.CHAT_DEFAULT_PAGE_SIZE
        self._typing_ttl = (
            typing_ttl_seconds
            if typing_ttl_seconds is not None
            else Config.TYPING_INDICATOR_TTL_SECONDS
        )
        self._clock = clock

        self.selected_thread_id: Optional[str] = None
        self.view: Optional[ThreadMessageView] = None
        self.has_more = False
        self.last_error: Optional[ChatError] = None
        self._page = 0
        self._subscription: Optional[ThreadSubscription] = None
        self._typing_until: dict[str, float] = {}

    @property
    def subscription(self) -> Optional[ThreadSubscription]:
        return self._subscription

    def _is_current(self, thread_id: str, view: Optional[ThreadMessageView] = None) -> bool:
        if self.selected_thread_id != thread_id:
            return False
        return view is None or self.view is view

    async def select_thread(self, thread_id: str) -> bool:
        """
        Make thread_id the selected thread.

        Returns False when the selection moved on before page 1 arrived (the
        page is discarded) or when loading failed (see last_error).
        """
        self.selected_thread_id = thread_id
        view = ThreadMessageView(thread_id)
        self.view = view
        self.has_more = False
        self.last_error = None
        self._page = 0
        self._typing_until.clear()

        if self._subscription is not None:
            previous, self._subscription = self._subscription, None
            await previous.close()

        subscription = await self._sync.subscribe(thread_id, self._handlers_for(view))
        if not self._is_current(thread_id, view):
            await subscription.close()
            return False
        self._subscription = subscription

        result = await self._list_messages.execute(
            ListMessagesQuery(thread_id=thread_id, page=1, page_size=self._page_size)
        )
        if not self._is_current(thread_id, view):
            logger.debug(f"[ThreadSession] Discarded stale page for thread {thread_id}")
            return False
        if result.is_err():
            self.last_error = result.error
            return False

        page = result.value
        view.prepend_older(page.items)
        self._page = 1
        self.has_more = page.has_more
        return True

    async def load_older(self) -> bool:
        view = self.view
        if view is None or not self.has_more:
            return False
        thread_id = view.thread_id
        next_page = self._page + 1
        result = await self._list_messages.execute(
            ListMessagesQuery(thread_id=thread_id, page=next_page, page_size=self._page_size)
        )
        if not self._is_current(thread_id, view):
            return False
        if result.is_err():
            self.last_error = result.error
            return False
        view.prepend_older(result.value.items)
        self._page = next_page
        self.has_more = result.value.has_more
        return True

    async def send(
        self, body: str, payload: Optional[dict[str, Any]] = None
    ) -> Result[ChatMessageDTO]:
        view = self.view
        if view is None:
            raise RuntimeError("No thread selected")
        pending = view.add_pending(body, payload)
        result = await self._send_message.execute(
            SendMessageCommand(thread_id=view.thread_id, body=body, payload=payload)
        )
        if result.is_ok():
            view.confirm_pending(pending.correlation_id, result.value)
        else:
            view.fail_pending(pending.correlation_id, result.error)
        return result

    async def mark_read(self) -> Result[None]:
        if self.selected_thread_id is None:
            raise RuntimeError("No thread selected")
        return await self._mark_thread_as_read.execute(
            MarkThreadAsReadCommand(thread_id=self.selected_thread_id)
        )

    async def typing(self, participant_id: str) -> None:
        if self.selected_thread_id is not None:
            await self._sync.broadcast_typing(self.selected_thread_id, participant_id)

    def typing_participants(self) -> list[str]:
        now = self._clock()
        self._typing_until = {
            pid: until for pid, until in self._typing_until.items() if until > now
        }
        return sorted(self._typing_until)

    async def close(self) -> None:
        self.selected_thread_id = None
        self.view = None
        self._typing_until.clear()
        if self._subscription is not None:
            subscription, self._subscription = self._subscription, None
            await subscription.close()

    def _handlers_for(self, view: ThreadMessageView) -> ThreadRealtimeHandlers:
        def on_message(message: ChatMessageDTO) -> None:
            if self.view is view:
                view.apply_incoming(message)

        def on_typing(event: TypingEvent) -> None:
            if self.view is view:
                self._typing_until[event.participant_id] = self._clock() + self._typing_ttl

        def on_delivered(message_id: str) -> None:
            if self.view is view:
                view.apply_delivered(message_id)

        return ThreadRealtimeHandlers(
            on_message=on_message, on_typing=on_typing, on_delivered=on_delivered
        )
