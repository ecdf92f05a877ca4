"""List Messages Query - one page of a thread, oldest first."""

from dataclasses import dataclass
from typing import Optional

from marketplace_chat.application.common.interfaces import Query, QueryHandler
from marketplace_chat.application.common.result import Result, capture
from marketplace_chat.application.dto import ChatMessageDTO, Page, build_page
from marketplace_chat.application.ports import (
    AuthService,
    ChatMessageRepository,
    ChatThreadRepository,
)
from marketplace_chat.application.services.thread_access import ThreadAccess
from marketplace_chat.config.settings import Config
from marketplace_chat.domain.exceptions import ChatErrorCode


@dataclass(frozen=True)
class ListMessagesQuery(Query[Page[ChatMessageDTO]]):
    thread_id: str
    page: int = 1
    page_size: Optional[int] = None


class ListMessagesHandler(QueryHandler[Page[ChatMessageDTO]]):
    def __init__(
        self,
        message_repository: ChatMessageRepository,
        thread_repository: ChatThreadRepository,
        auth_service: AuthService,
    ):
        self._message_repository = message_repository
        self._access = ThreadAccess(thread_repository, auth_service)

    async def execute(self, query: ListMessagesQuery) -> Result[Page[ChatMessageDTO]]:
        return await capture(self._list(query))

    async def _list(self, query: ListMessagesQuery) -> Page[ChatMessageDTO]:
        page = max(1, query.page)
        page_size = query.page_size or Config.CHAT_DEFAULT_PAGE_SIZE
        page_size = min(max(1, page_size), Config.CHAT_MAX_PAGE_SIZE)

        await self._access.authorize(query.thread_id, ChatErrorCode.READER_MISSING)

        result = await self._message_repository.list_by_thread(
            query.thread_id, page, page_size
        )
        return build_page(result.items, result.total, page, page_size)
