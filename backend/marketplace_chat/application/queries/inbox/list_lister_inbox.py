"""
List Lister Inbox Query.

Loads every thread visible to the signed-in lister (all repository pages, up
to INBOX_MAX_PAGES) and groups them by listing.
"""

from dataclasses import dataclass
from typing import Any, Optional, Union

from marketplace_chat.application.common.interfaces import Query, QueryHandler
from marketplace_chat.application.common.result import Result, capture
from marketplace_chat.application.dto import ListerInboxDTO, ThreadFiltersDTO
from marketplace_chat.application.ports import AuthService, ChatThreadRepository
from marketplace_chat.application.services.inbox_aggregator import (
    build_lister_inbox,
    collect_all_pages,
)
from marketplace_chat.application.services.validation import parse_thread_filters
from marketplace_chat.config.settings import Config
from marketplace_chat.domain.exceptions import ChatErrorCode, IdentityMissingError


@dataclass(frozen=True)
class ListListerInboxQuery(Query[ListerInboxDTO]):
    filters: Optional[Union[ThreadFiltersDTO, dict[str, Any]]] = None


class ListListerInboxHandler(QueryHandler[ListerInboxDTO]):
    def __init__(self, thread_repository: ChatThreadRepository, auth_service: AuthService):
        self._thread_repository = thread_repository
        self._auth_service = auth_service

    async def execute(self, query: ListListerInboxQuery) -> Result[ListerInboxDTO]:
        return await capture(self._list(query))

    async def _list(self, query: ListListerInboxQuery) -> ListerInboxDTO:
        filters = parse_thread_filters(query.filters)
        profile = await self._auth_service.get_current()
        if not profile.user_id:
            raise IdentityMissingError(
                "A signed-in user is required", ChatErrorCode.USER_REQUIRED
            )

        async def fetch(page_filters: ThreadFiltersDTO):
            return await self._thread_repository.list_for_lister(
                page_filters, profile.user_id, profile.org_id
            )

        threads = await collect_all_pages(fetch, filters, Config.INBOX_MAX_PAGES)
        return build_lister_inbox(threads)
