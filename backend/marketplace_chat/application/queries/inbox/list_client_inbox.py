"""
List Client Inbox Query.

Acting as a contact (explicit filters.contact_id, else the session's
contact id) lists the contact's threads; otherwise a signed-in user lists
their own. One entry per thread, most recent first, no grouping.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from marketplace_chat.application.common.interfaces import Query, QueryHandler
from marketplace_chat.application.common.result import Result, capture
from marketplace_chat.application.dto import ClientInboxDTO, ThreadFiltersDTO
from marketplace_chat.application.ports import AuthService, ChatThreadRepository
from marketplace_chat.application.services.inbox_aggregator import (
    build_client_inbox,
    collect_all_pages,
)
from marketplace_chat.application.services.validation import parse_thread_filters
from marketplace_chat.config.settings import Config
from marketplace_chat.domain.exceptions import ChatErrorCode, IdentityMissingError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ListClientInboxQuery(Query[ClientInboxDTO]):
    filters: Optional[Union[ThreadFiltersDTO, dict[str, Any]]] = None


class ListClientInboxHandler(QueryHandler[ClientInboxDTO]):
    def __init__(self, thread_repository: ChatThreadRepository, auth_service: AuthService):
        self._thread_repository = thread_repository
        self._auth_service = auth_service

    async def execute(self, query: ListClientInboxQuery) -> Result[ClientInboxDTO]:
        return await capture(self._list(query))

    async def _list(self, query: ListClientInboxQuery) -> ClientInboxDTO:
        filters = parse_thread_filters(query.filters)
        profile = await self._auth_service.get_current()
        contact_id = filters.contact_id or profile.contact_id
        user_id = profile.user_id

        if contact_id:
            logger.debug(f"[ClientInbox] Listing threads for contact {contact_id}")

            async def fetch(page_filters: ThreadFiltersDTO):
                return await self._thread_repository.list_for_contact(
                    page_filters, contact_id, profile.org_id
                )

        elif user_id:
            logger.debug(f"[ClientInbox] Listing threads for user {user_id}")

            async def fetch(page_filters: ThreadFiltersDTO):
                return await self._thread_repository.list_for_lister(
                    page_filters, user_id, profile.org_id
                )

        else:
            raise IdentityMissingError(
                "Could not determine the user or contact identity",
                ChatErrorCode.USER_REQUIRED,
            )

        threads = await collect_all_pages(fetch, filters, Config.INBOX_MAX_PAGES)
        return build_client_inbox(threads)
