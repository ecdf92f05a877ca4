"""
Prisma Chat Message Repository Implementation.

Messages are append-only; the only updates are delivery/read timestamps,
which are never cleared.
"""

import logging
from typing import Any, Optional

from prisma import Json, Prisma

from marketplace_chat.application.dto import ChatMessageDTO, Page, build_page
from marketplace_chat.application.ports import ChatMessageRepository
from marketplace_chat.domain.clock import utc_now
from marketplace_chat.domain.enums import ParticipantType, SenderType
from marketplace_chat.infrastructure.persistence.errors import storage_errors
from marketplace_chat.infrastructure.persistence.query_builder import (
    message_from_record,
    sender_columns,
    unread_for_reader,
)

logger = logging.getLogger(__name__)


class PrismaChatMessageRepository(ChatMessageRepository):
    _prisma: Prisma

    def __init__(self, prisma: Prisma):
        self._prisma = prisma

    async def list_by_thread(
        self, thread_id: str, page: int, page_size: int
    ) -> Page[ChatMessageDTO]:
        where = {"thread_id": thread_id}
        with storage_errors("list messages"):
            total = await self._prisma.chatmessage.count(where=where)
            records = await self._prisma.chatmessage.find_many(
                where=where,
                order=[{"created_at": "asc"}, {"id": "asc"}],
                skip=(page - 1) * page_size,
                take=page_size,
            )
        return build_page([message_from_record(r) for r in records], total, page, page_size)

    async def create(
        self,
        thread_id: str,
        sender_type: SenderType,
        sender_id: str,
        body: str,
        payload: Optional[dict[str, Any]] = None,
    ) -> ChatMessageDTO:
        data: dict[str, Any] = {
            "thread_id": thread_id,
            "sender_type": SenderType(sender_type).value,
            "body": body,
            **sender_columns(SenderType(sender_type), sender_id),
        }
        if payload is not None:
            data["payload"] = Json(payload)

        with storage_errors("create message"):
            record = await self._prisma.chatmessage.create(data=data)
        return message_from_record(record)

    async def mark_thread_as_read(
        self, thread_id: str, reader_type: ParticipantType, reader_id: str
    ) -> None:
        moment = utc_now()
        unread = {"thread_id": thread_id, **unread_for_reader(ParticipantType(reader_type), reader_id)}

        with storage_errors("mark thread as read"):
            async with self._prisma.tx() as transaction:
                never_delivered = await transaction.chatmessage.update_many(
                    where={**unread, "delivered_at": None},
                    data={"delivered_at": moment, "read_at": moment},
                )
                delivered = await transaction.chatmessage.update_many(
                    where=unread,
                    data={"read_at": moment},
                )

        logger.info(
            f"[ChatMessages] Marked {never_delivered + delivered} messages read in thread {thread_id}"
        )
