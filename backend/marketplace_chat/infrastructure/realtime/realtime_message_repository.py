"""
Realtime Message Repository - decorator that publishes message.inserted.

Wraps any ChatMessageRepository: reads and mark-as-read pass straight
through, create() publishes the stored message to the thread channel.
Publishing is best effort; the message is already stored when it runs.
"""

import logging
from typing import Any, Optional

from marketplace_chat.application.dto import ChatMessageDTO, Page
from marketplace_chat.application.ports import ChatMessageRepository, MessageEventPublisher
from marketplace_chat.domain.enums import ParticipantType, SenderType
from marketplace_chat.domain.exceptions import ChatError

logger = logging.getLogger(__name__)


class RealtimeChatMessageRepository(ChatMessageRepository):
    def __init__(self, inner: ChatMessageRepository, publisher: MessageEventPublisher):
        self._inner = inner
        self._publisher = publisher

    async def list_by_thread(
        self, thread_id: str, page: int, page_size: int
    ) -> Page[ChatMessageDTO]:
        return await self._inner.list_by_thread(thread_id, page, page_size)

    async def create(
        self,
        thread_id: str,
        sender_type: SenderType,
        sender_id: str,
        body: str,
        payload: Optional[dict[str, Any]] = None,
    ) -> ChatMessageDTO:
        message = await self._inner.create(thread_id, sender_type, sender_id, body, payload)
        try:
            await self._publisher.publish_message_inserted(message)
        except ChatError as e:
            logger.warning(f"[Realtime] message.inserted not published for {message.id}: {e.message}")
        return message

    async def mark_thread_as_read(
        self, thread_id: str, reader_type: ParticipantType, reader_id: str
    ) -> None:
        await self._inner.mark_thread_as_read(thread_id, reader_type, reader_id)
