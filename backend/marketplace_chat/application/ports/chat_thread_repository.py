"""
Chat Thread Repository Port - Interface for thread persistence.
Implementations:
    marketplace_chat/infrastructure/persistence/prisma_chat_thread_repository.py
    marketplace_chat/infrastructure/memory/chat_store.py

Listings are ordered by last_message_at descending with threads lacking messages
last, then created_at descending, then id.
unread_count on returned threads is computed for the identity doing the listing,
and for user_id in find_by_property_and_user. get_by_id reports 0.
"""

from abc import ABC, abstractmethod
from typing import Optional

from marketplace_chat.application.dto import ChatThreadDTO, Page, ThreadFiltersDTO


class ChatThreadRepository(ABC):
    @abstractmethod
    async def list_for_lister(
        self, filters: ThreadFiltersDTO, user_id: str, org_id: Optional[str]
    ) -> Page[ChatThreadDTO]: ...

    @abstractmethod
    async def list_for_contact(
        self, filters: ThreadFiltersDTO, contact_id: str, org_id: Optional[str]
    ) -> Page[ChatThreadDTO]: ...

    @abstractmethod
    async def get_by_id(self, thread_id: str) -> Optional[ChatThreadDTO]: ...

    @abstractmethod
    async def touch_last_message_at(self, thread_id: str, timestamp_iso: str) -> None: ...

    @abstractmethod
    async def find_by_property_and_user(
        self, property_id: str, user_id: str
    ) -> Optional[ChatThreadDTO]: ...

    @abstractmethod
    async def create(
        self,
        org_id: Optional[str],
        property_id: str,
        created_by: str,
        participant_user_ids: list[str],
    ) -> ChatThreadDTO:
        """Insert the thread and its participants; delete the thread if participants fail."""
        ...
