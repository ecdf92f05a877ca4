"""Inbox DTOs: lister view grouped by listing, client view flat."""

from typing import Optional

from pydantic import BaseModel

from marketplace_chat.application.dto.thread import ChatThreadDTO, PropertySummaryDTO


class ListerThreadGroupDTO(BaseModel):
    group_key: str
    property: Optional[PropertySummaryDTO] = None
    thread_count: int
    unread_count: int
    threads: list[ChatThreadDTO]


class ListerInboxDTO(BaseModel):
    groups: list[ListerThreadGroupDTO]
    total_unread: int
    total_threads: int


class ClientInboxEntryDTO(BaseModel):
    thread: ChatThreadDTO
    property: Optional[PropertySummaryDTO] = None
    unread_count: int


class ClientInboxDTO(BaseModel):
    entries: list[ClientInboxEntryDTO]
    total_unread: int
    total_threads: int
