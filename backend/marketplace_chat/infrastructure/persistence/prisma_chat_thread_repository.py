"""
Prisma Chat Thread Repository Implementation.

Tables (see backend/prisma/schema.prisma): chat_threads, chat_participants,
properties, profiles, lead_contacts, chat_messages.

Visibility:
- lister: threads where the user is a participant, or that belong to the org
- contact: threads anchored to the contact or where the contact participates

unread_count is computed for the identity doing the listing, and for user_id in
find_by_property_and_user. get_by_id has no reader context and reports 0.
"""

import logging
from collections import Counter
from typing import Optional

from prisma import Prisma
from prisma.errors import PrismaError

from marketplace_chat.application.dto import ChatThreadDTO, Page, ThreadFiltersDTO, build_page
from marketplace_chat.application.ports import ChatThreadRepository
from marketplace_chat.domain.clock import parse_timestamp
from marketplace_chat.domain.enums import ParticipantType
from marketplace_chat.domain.exceptions import InfrastructureError
from marketplace_chat.infrastructure.persistence.errors import storage_errors
from marketplace_chat.infrastructure.persistence.query_builder import (
    THREAD_INCLUDE,
    THREAD_ORDER,
    contact_scope,
    lister_scope,
    thread_from_record,
    thread_listing_where,
    unread_for_reader,
)

logger = logging.getLogger(__name__)


class PrismaChatThreadRepository(ChatThreadRepository):
    _prisma: Prisma

    def __init__(self, prisma: Prisma):
        """
        Args:
            prisma: Connected Prisma client (injected by DI container)
        """
        self._prisma = prisma

    async def list_for_lister(
        self, filters: ThreadFiltersDTO, user_id: str, org_id: Optional[str]
    ) -> Page[ChatThreadDTO]:
        return await self._list(
            filters, lister_scope(user_id, org_id), ParticipantType.USER, user_id
        )

    async def list_for_contact(
        self, filters: ThreadFiltersDTO, contact_id: str, org_id: Optional[str]
    ) -> Page[ChatThreadDTO]:
        return await self._list(
            filters, contact_scope(contact_id, org_id), ParticipantType.CONTACT, contact_id
        )

    async def get_by_id(self, thread_id: str) -> Optional[ChatThreadDTO]:
        with storage_errors("load thread"):
            record = await self._prisma.chatthread.find_unique(
                where={"id": thread_id}, include=THREAD_INCLUDE
            )
        return thread_from_record(record) if record else None

    async def touch_last_message_at(self, thread_id: str, timestamp_iso: str) -> None:
        moment = parse_timestamp(timestamp_iso)
        # only ever moves forward
        with storage_errors("update thread activity"):
            await self._prisma.chatthread.update_many(
                where={
                    "id": thread_id,
                    "OR": [{"last_message_at": None}, {"last_message_at": {"lt": moment}}],
                },
                data={"last_message_at": moment},
            )

    async def find_by_property_and_user(
        self, property_id: str, user_id: str
    ) -> Optional[ChatThreadDTO]:
        with storage_errors("find thread"):
            record = await self._prisma.chatthread.find_first(
                where={
                    "property_id": property_id,
                    "participants": {"some": {"user_id": user_id}},
                },
                include=THREAD_INCLUDE,
                order={"created_at": "asc"},
            )
            if record is None:
                return None
            unread_counts = await self._unread_counts(
                [record.id], ParticipantType.USER, user_id
            )
        return thread_from_record(record, unread_counts)

    async def create(
        self,
        org_id: Optional[str],
        property_id: str,
        created_by: str,
        participant_user_ids: list[str],
    ) -> ChatThreadDTO:
        with storage_errors("create thread"):
            thread = await self._prisma.chatthread.create(
                data={
                    "org_id": org_id,
                    "property_id": property_id,
                    "created_by": created_by,
                }
            )

        try:
            await self._prisma.chatparticipant.create_many(
                data=[{"thread_id": thread.id, "user_id": uid} for uid in participant_user_ids]
            )
        except PrismaError as e:
            logger.warning(
                f"[ChatThreads] Participants failed for thread {thread.id}, deleting thread row"
            )
            await self._delete_orphan(thread.id)
            raise InfrastructureError("Could not add thread participants", e) from e

        created = await self.get_by_id(thread.id)
        if created is None:
            raise InfrastructureError(f"Thread {thread.id} vanished after creation")
        return created

    async def _delete_orphan(self, thread_id: str) -> None:
        try:
            await self._prisma.chatthread.delete(where={"id": thread_id})
        except PrismaError as e:
            logger.error(f"[ChatThreads] Compensating delete failed for thread {thread_id}: {e}")

    async def _list(
        self,
        filters: ThreadFiltersDTO,
        scope: dict,
        reader_type: ParticipantType,
        reader_id: str,
    ) -> Page[ChatThreadDTO]:
        where = thread_listing_where(filters, scope, reader_type, reader_id)
        skip = (filters.page - 1) * filters.page_size

        with storage_errors("list threads"):
            total = await self._prisma.chatthread.count(where=where)
            records = await self._prisma.chatthread.find_many(
                where=where,
                include=THREAD_INCLUDE,
                order=THREAD_ORDER,
                skip=skip,
                take=filters.page_size,
            )
            unread_counts = await self._unread_counts(
                [r.id for r in records], reader_type, reader_id
            )

        items = [thread_from_record(r, unread_counts) for r in records]
        return build_page(items, total, filters.page, filters.page_size)

    async def _unread_counts(
        self, thread_ids: list[str], reader_type: ParticipantType, reader_id: str
    ) -> dict[str, int]:
        if not thread_ids:
            return {}
        unread = await self._prisma.chatmessage.find_many(
            where={"thread_id": {"in": thread_ids}, **unread_for_reader(reader_type, reader_id)},
        )
        return dict(Counter(message.thread_id for message in unread))
