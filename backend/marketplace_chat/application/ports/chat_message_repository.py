"""
Chat Message Repository Port - Interface for message persistence.
Implementations:
    marketplace_chat/infrastructure/persistence/prisma_chat_message_repository.py
    marketplace_chat/infrastructure/memory/chat_store.py
    marketplace_chat/infrastructure/realtime/realtime_message_repository.py (decorator)
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from marketplace_chat.application.dto import ChatMessageDTO, Page
from marketplace_chat.domain.enums import ParticipantType, SenderType


class ChatMessageRepository(ABC):
    @abstractmethod
    async def list_by_thread(
        self, thread_id: str, page: int, page_size: int
    ) -> Page[ChatMessageDTO]:
        """Messages ordered by created_at ascending."""
        ...

    @abstractmethod
    async def create(
        self,
        thread_id: str,
        sender_type: SenderType,
        sender_id: str,
        body: str,
        payload: Optional[dict[str, Any]] = None,
    ) -> ChatMessageDTO: ...

    @abstractmethod
    async def mark_thread_as_read(
        self, thread_id: str, reader_type: ParticipantType, reader_id: str
    ) -> None:
        """Mark every message unread for the reader as read, with one timestamp."""
        ...
