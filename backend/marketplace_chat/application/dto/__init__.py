"""
DTOs - Data Transfer Objects

DTOs are the only data crossing the core/storage boundary:
- message.py -> ChatMessageDTO
- thread.py  -> ChatThreadDTO, ChatParticipantDTO, PropertySummaryDTO, ThreadFiltersDTO
- inbox.py   -> lister and client inbox shapes
- common.py  -> Page, build_page, canonical timestamps

Note: These are different from domain entities.
DTOs carry ISO-8601 strings, entities carry datetimes.
"""

from marketplace_chat.application.dto.common import Page, Timestamp, build_page
from marketplace_chat.application.dto.message import ChatMessageDTO
from marketplace_chat.application.dto.thread import (
    ChatParticipantDTO,
    ChatThreadDTO,
    PropertySummaryDTO,
    ThreadFiltersDTO,
)
from marketplace_chat.application.dto.inbox import (
    ClientInboxDTO,
    ClientInboxEntryDTO,
    ListerInboxDTO,
    ListerThreadGroupDTO,
)

__all__ = [
    "Page",
    "Timestamp",
    "build_page",
    "ChatMessageDTO",
    "ChatParticipantDTO",
    "ChatThreadDTO",
    "PropertySummaryDTO",
    "ThreadFiltersDTO",
    "ClientInboxDTO",
    "ClientInboxEntryDTO",
    "ListerInboxDTO",
    "ListerThreadGroupDTO",
]
