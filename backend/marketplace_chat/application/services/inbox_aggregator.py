"""
Inbox aggregation.

Lister view: threads grouped by listing, each group with its own unread total.
Client view: one entry per thread.

Ordering is fully deterministic (recency descending, ties by id / group key)
so identical inputs always produce identical inboxes whatever their order.
"""

import logging
from typing import Awaitable, Callable, Optional

from marketplace_chat.application.dto import (
    ChatThreadDTO,
    ClientInboxDTO,
    ClientInboxEntryDTO,
    ListerInboxDTO,
    ListerThreadGroupDTO,
    Page,
    ThreadFiltersDTO,
)

logger = logging.getLogger(__name__)

NO_PROPERTY_KEY = "none"

PageFetcher = Callable[[ThreadFiltersDTO], Awaitable[Page[ChatThreadDTO]]]


def thread_activity(thread: ChatThreadDTO) -> str:
    # canonical timestamps sort chronologically as strings
    return thread.last_message_at or thread.created_at


def sort_threads_by_activity(threads: list[ChatThreadDTO]) -> list[ChatThreadDTO]:
    ordered = sorted(threads, key=lambda t: t.id)
    ordered.sort(key=thread_activity, reverse=True)
    return ordered


def group_threads_by_property(threads: list[ChatThreadDTO]) -> list[ListerThreadGroupDTO]:
    buckets: dict[str, list[ChatThreadDTO]] = {}
    for thread in threads:
        key = thread.property.id if thread.property else NO_PROPERTY_KEY
        buckets.setdefault(key, []).append(thread)

    groups = []
    for key, members in buckets.items():
        ordered = sort_threads_by_activity(members)
        groups.append(
            ListerThreadGroupDTO(
                group_key=key,
                property=next((t.property for t in ordered if t.property), None),
                thread_count=len(ordered),
                unread_count=sum(t.unread_count for t in ordered),
                threads=ordered,
            )
        )

    groups.sort(key=lambda g: g.group_key)
    groups.sort(key=lambda g: thread_activity(g.threads[0]), reverse=True)
    return groups


def build_lister_inbox(threads: list[ChatThreadDTO]) -> ListerInboxDTO:
    groups = group_threads_by_property(threads)
    return ListerInboxDTO(
        groups=groups,
        total_unread=sum(g.unread_count for g in groups),
        total_threads=sum(g.thread_count for g in groups),
    )


def build_client_inbox(threads: list[ChatThreadDTO]) -> ClientInboxDTO:
    entries = [
        ClientInboxEntryDTO(thread=t, property=t.property, unread_count=t.unread_count)
        for t in sort_threads_by_activity(threads)
    ]
    return ClientInboxDTO(
        entries=entries,
        total_unread=sum(e.unread_count for e in entries),
        total_threads=len(entries),
    )


async def collect_all_pages(
    fetch: PageFetcher, filters: ThreadFiltersDTO, max_pages: int
) -> list[ChatThreadDTO]:
    """Walk the repository pages from page 1; duplicates across pages are dropped."""
    threads: list[ChatThreadDTO] = []
    seen: set[str] = set()
    page: Optional[Page[ChatThreadDTO]] = None
    for number in range(1, max_pages + 1):
        page = await fetch(filters.model_copy(update={"page": number}))
        for thread in page.items:
            if thread.id not in seen:
                seen.add(thread.id)
                threads.append(thread)
        if not page.has_more:
            break
    else:
        if page is not None and page.has_more:
            logger.warning(
                f"Inbox truncated at {max_pages} pages ({len(threads)} of {page.total} threads)"
            )
    return threads
