"""
In-memory chat storage.

InMemoryChatStore holds the rows; the two repositories are views over one
store, the way the Prisma repositories share one database.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from marketplace_chat.application.dto import (
    ChatMessageDTO,
    ChatThreadDTO,
    Page,
    ThreadFiltersDTO,
    build_page,
)
from marketplace_chat.application.mappers import from_domain_message, from_domain_thread
from marketplace_chat.application.ports import ChatMessageRepository, ChatThreadRepository
from marketplace_chat.domain.clock import ensure_utc, parse_timestamp, utc_now
from marketplace_chat.domain.entities import ChatMessage, ChatThread, Participant, ThreadPropertySnapshot
from marketplace_chat.domain.enums import ParticipantType, SenderType
from marketplace_chat.domain.exceptions import EntityNotFoundError, InfrastructureError
from marketplace_chat.domain.value_objects import MessageBody, UniqueEntityID

logger = logging.getLogger(__name__)


class InMemoryChatStore:
    """
    Rows for threads, messages, listings, profiles and lead contacts.

    With strict_profiles=True, adding an unknown user as participant fails
    the way a foreign key would.
    """

    def __init__(
        self,
        clock: Optional[Callable[[], datetime]] = None,
        strict_profiles: bool = False,
    ):
        self.threads: dict[str, ChatThread] = {}
        self.messages: dict[str, list[ChatMessage]] = {}
        self.properties: dict[str, ThreadPropertySnapshot] = {}
        self.profiles: dict[str, Participant] = {}
        self.contacts: dict[str, Participant] = {}
        self.strict_profiles = strict_profiles
        self._clock = clock or utc_now
        self._last_timestamp: Optional[datetime] = None

    def now(self) -> datetime:
        """Store clock, strictly increasing so insert order is creation order."""
        moment = ensure_utc(self._clock())
        if self._last_timestamp is not None and moment <= self._last_timestamp:
            moment = self._last_timestamp + timedelta(microseconds=1)
        self._last_timestamp = moment
        return moment

    # ==================== SEEDING ====================

    def add_property(self, property_id: str, **fields: Any) -> ThreadPropertySnapshot:
        snapshot = ThreadPropertySnapshot(id=property_id, **fields)
        self.properties[property_id] = snapshot
        return snapshot

    def add_profile(self, user_id: str, **fields: Any) -> Participant:
        participant = Participant(id=user_id, type=ParticipantType.USER, **fields)
        self.profiles[user_id] = participant
        return participant

    def add_contact(self, contact_id: str, **fields: Any) -> Participant:
        participant = Participant(id=contact_id, type=ParticipantType.CONTACT, **fields)
        self.contacts[contact_id] = participant
        return participant

    def add_thread(self, thread: ChatThread) -> ChatThread:
        self.threads[str(thread.id)] = thread
        self.messages.setdefault(str(thread.id), [])
        return thread

    # ==================== READ HELPERS ====================

    def messages_for(self, thread_id: str) -> list[ChatMessage]:
        return sorted(self.messages.get(thread_id, []), key=lambda m: (m.created_at, str(m.id)))

    def unread_count(self, thread_id: str, reader_type: ParticipantType, reader_id: str) -> int:
        return sum(
            1 for m in self.messages.get(thread_id, []) if m.is_unread_for(reader_type, reader_id)
        )

    def thread_dto(
        self,
        thread: ChatThread,
        reader: Optional[tuple[ParticipantType, str]] = None,
    ) -> ChatThreadDTO:
        thread_id = str(thread.id)
        history = self.messages_for(thread_id)
        dto = from_domain_thread(thread)
        return dto.model_copy(
            update={
                "unread_count": self.unread_count(thread_id, *reader) if reader else 0,
                "last_message": from_domain_message(history[-1]) if history else None,
            }
        )

    def participant_for_user(self, user_id: str) -> Participant:
        profile = self.profiles.get(user_id)
        if profile is None:
            if self.strict_profiles:
                raise InfrastructureError(f"Unknown profile {user_id}")
            return Participant(id=user_id, type=ParticipantType.USER)
        return Participant.restore(profile.to_snapshot())


def _listing_rank(thread: ChatThread) -> tuple:
    # last_message_at descending with threads lacking messages after the rest
    if thread.last_message_at is None:
        return (False,)
    return (True, thread.last_message_at)


def _matches_search(dto: ChatThreadDTO, search: Optional[str]) -> bool:
    if not search:
        return True
    needle = search.lower()
    if dto.property and dto.property.title and needle in dto.property.title.lower():
        return True
    return any(needle in (p.display_name or "").lower() for p in dto.participants)


class InMemoryChatThreadRepository(ChatThreadRepository):
    def __init__(self, store: InMemoryChatStore):
        self._store = store

    async def list_for_lister(
        self, filters: ThreadFiltersDTO, user_id: str, org_id: Optional[str]
    ) -> Page[ChatThreadDTO]:
        visible = [
            t
            for t in self._store.threads.values()
            if t.find_participant(ParticipantType.USER, user_id)
            or (org_id and t.org_id == org_id)
        ]
        return self._page(visible, filters, (ParticipantType.USER, user_id))

    async def list_for_contact(
        self, filters: ThreadFiltersDTO, contact_id: str, org_id: Optional[str]
    ) -> Page[ChatThreadDTO]:
        visible = [
            t
            for t in self._store.threads.values()
            if (t.contact_id == contact_id or t.find_participant(ParticipantType.CONTACT, contact_id))
            and (not org_id or t.org_id == org_id)
        ]
        return self._page(visible, filters, (ParticipantType.CONTACT, contact_id))

    async def get_by_id(self, thread_id: str) -> Optional[ChatThreadDTO]:
        thread = self._store.threads.get(thread_id)
        return self._store.thread_dto(thread) if thread else None

    async def touch_last_message_at(self, thread_id: str, timestamp_iso: str) -> None:
        thread = self._store.threads.get(thread_id)
        if thread is None:
            raise EntityNotFoundError(f"Thread {thread_id} not found")
        thread.touch(parse_timestamp(timestamp_iso))

    async def find_by_property_and_user(
        self, property_id: str, user_id: str
    ) -> Optional[ChatThreadDTO]:
        candidates = [
            t
            for t in self._store.threads.values()
            if t.property
            and t.property.id == property_id
            and t.find_participant(ParticipantType.USER, user_id)
        ]
        if not candidates:
            return None
        earliest = min(candidates, key=lambda t: (t.created_at, str(t.id)))
        return self._store.thread_dto(earliest, (ParticipantType.USER, user_id))

    async def create(
        self,
        org_id: Optional[str],
        property_id: str,
        created_by: str,
        participant_user_ids: list[str],
    ) -> ChatThreadDTO:
        thread = self._insert_thread(org_id, property_id, created_by)
        try:
            self._insert_participants(thread, participant_user_ids)
        except InfrastructureError:
            logger.warning(f"[InMemoryChat] Participants failed, deleting thread {thread.id}")
            self._delete_thread(str(thread.id))
            raise
        return self._store.thread_dto(thread)

    def _insert_thread(
        self, org_id: Optional[str], property_id: str, created_by: str
    ) -> ChatThread:
        snapshot = self._store.properties.get(property_id) or ThreadPropertySnapshot(id=property_id)
        thread = ChatThread(
            id=UniqueEntityID.generate(),
            org_id=org_id,
            property=snapshot,
            contact_id=None,
            created_by=created_by,
            created_at=self._store.now(),
        )
        return self._store.add_thread(thread)

    def _insert_participants(self, thread: ChatThread, user_ids: list[str]) -> None:
        participants = [self._store.participant_for_user(uid) for uid in user_ids]
        for participant in participants:
            thread.add_participant(participant)

    def _delete_thread(self, thread_id: str) -> None:
        self._store.threads.pop(thread_id, None)
        self._store.messages.pop(thread_id, None)

    def _page(
        self,
        threads: list[ChatThread],
        filters: ThreadFiltersDTO,
        reader: tuple[ParticipantType, str],
    ) -> Page[ChatThreadDTO]:
        if filters.property_id:
            threads = [t for t in threads if t.property and t.property.id == filters.property_id]
        if filters.contact_id:
            threads = [t for t in threads if t.contact_id == filters.contact_id]

        ordered = sorted(threads, key=lambda t: str(t.id))
        ordered.sort(key=lambda t: t.created_at, reverse=True)
        ordered.sort(key=_listing_rank, reverse=True)

        dtos = [self._store.thread_dto(t, reader) for t in ordered]
        dtos = [d for d in dtos if _matches_search(d, filters.search)]
        if filters.unread_only:
            dtos = [d for d in dtos if d.unread_count > 0]

        start = (filters.page - 1) * filters.page_size
        items = dtos[start : start + filters.page_size]
        return build_page(items, len(dtos), filters.page, filters.page_size)


class InMemoryChatMessageRepository(ChatMessageRepository):
    def __init__(self, store: InMemoryChatStore):
        self._store = store

    async def list_by_thread(
        self, thread_id: str, page: int, page_size: int
    ) -> Page[ChatMessageDTO]:
        history = self._store.messages_for(thread_id)
        start = (page - 1) * page_size
        items = [from_domain_message(m) for m in history[start : start + page_size]]
        return build_page(items, len(history), page, page_size)

    async def create(
        self,
        thread_id: str,
        sender_type: SenderType,
        sender_id: str,
        body: str,
        payload: Optional[dict[str, Any]] = None,
    ) -> ChatMessageDTO:
        if thread_id not in self._store.threads:
            raise EntityNotFoundError(f"Thread {thread_id} not found")
        message = ChatMessage.create(
            thread_id=UniqueEntityID(thread_id),
            sender_type=sender_type,
            sender_id=sender_id,
            body=MessageBody.from_persistence(body),
            payload=payload,
            created_at=self._store.now(),
        )
        self._store.messages.setdefault(thread_id, []).append(message)
        return from_domain_message(message)

    async def mark_thread_as_read(
        self, thread_id: str, reader_type: ParticipantType, reader_id: str
    ) -> None:
        moment = self._store.now()
        for message in self._store.messages.get(thread_id, []):
            if message.is_unread_for(reader_type, reader_id):
                message.mark_read(moment)
