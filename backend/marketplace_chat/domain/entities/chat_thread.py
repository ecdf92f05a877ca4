"""
ChatThread Entity - A conversation anchored to one listing.

The thread owns its participants. They live in an index keyed by participant
id and are only reachable through the accessor methods, so ids stay unique.
"""

from __future__ import annotations

from dataclasses import InitVar, asdict, dataclass, field
from datetime import datetime
from typing import Iterable, Optional, Union

from marketplace_chat.domain.clock import (
    ensure_utc,
    format_optional_timestamp,
    format_timestamp,
    parse_optional_timestamp,
    parse_timestamp,
    utc_now,
)
from marketplace_chat.domain.entities.chat_message import ChatMessage
from marketplace_chat.domain.entities.participant import Participant
from marketplace_chat.domain.enums import ParticipantType, ThreadStatus
from marketplace_chat.domain.exceptions import InvariantViolationError
from marketplace_chat.domain.value_objects import UniqueEntityID


@dataclass(frozen=True)
class ThreadPropertySnapshot:
    """Denormalized summary of the listing a thread is about."""

    id: str
    title: Optional[str] = None
    price: Optional[float] = None
    currency: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    cover_image_url: Optional[str] = None
    operation_type: Optional[str] = None
    status: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> ThreadPropertySnapshot:
        return cls(**{name: data.get(name) for name in cls.__dataclass_fields__})


@dataclass
class ChatThread:
    id: UniqueEntityID
    org_id: Optional[str]
    property: Optional[ThreadPropertySnapshot]
    contact_id: Optional[str]
    created_by: Optional[str]
    created_at: datetime
    last_message_at: Optional[datetime] = None
    unread_count: int = 0
    status: ThreadStatus = ThreadStatus.OPEN
    last_message: Optional[ChatMessage] = None
    initial_participants: InitVar[Optional[Iterable[Participant]]] = None
    _participants: dict[str, Participant] = field(
        init=False, default_factory=dict, repr=False
    )

    def __post_init__(self, initial_participants: Optional[Iterable[Participant]]):
        self.status = ThreadStatus(self.status)
        self.created_at = ensure_utc(self.created_at)
        if self.last_message_at is not None:
            self.last_message_at = ensure_utc(self.last_message_at)
        if self.unread_count < 0:
            raise InvariantViolationError("unread_count cannot be negative")
        if self.last_message is not None:
            self._assert_same_thread(self.last_message)
        for participant in initial_participants or ():
            self.add_participant(participant)

    @classmethod
    def create(
        cls,
        org_id: Optional[str],
        property: Optional[ThreadPropertySnapshot],
        created_by: Optional[str],
        participants: Iterable[Participant] = (),
        contact_id: Optional[str] = None,
    ) -> ChatThread:
        """Factory method to create a new open thread with a generated ID."""
        return cls(
            id=UniqueEntityID.generate(),
            org_id=org_id,
            property=property,
            contact_id=contact_id,
            created_by=created_by,
            created_at=utc_now(),
            initial_participants=participants,
        )

    # -- participant index ---------------------------------------------------

    @property
    def participants(self) -> list[Participant]:
        return list(self._participants.values())

    def get_participant(self, participant_id: str) -> Optional[Participant]:
        return self._participants.get(participant_id)

    def find_participant(
        self, participant_type: Union[ParticipantType, str], participant_id: Optional[str]
    ) -> Optional[Participant]:
        if not participant_id:
            return None
        participant = self._participants.get(participant_id)
        if participant and participant.type is ParticipantType(participant_type):
            return participant
        return None

    def add_participant(self, participant: Participant) -> None:
        """Insert or replace the participant with the same id."""
        self._participants[participant.id] = participant

    # -- lifecycle -----------------------------------------------------------

    @property
    def is_archived(self) -> bool:
        return self.status is ThreadStatus.ARCHIVED

    def record_message(self, message: ChatMessage, increase_unread: bool = False) -> None:
        self._assert_same_thread(message)
        if self.last_message_at is None or message.created_at >= self.last_message_at:
            self.last_message_at = message.created_at
            self.last_message = message
        if increase_unread:
            self.unread_count += 1

    def reset_unread(self) -> None:
        self.unread_count = 0

    def archive(self) -> None:
        self.status = ThreadStatus.ARCHIVED

    def reopen(self) -> None:
        self.status = ThreadStatus.OPEN

    def touch(self, at: Optional[datetime] = None) -> None:
        moment = ensure_utc(at) if at else utc_now()
        if self.last_message_at is None or moment > self.last_message_at:
            self.last_message_at = moment

    def _assert_same_thread(self, message: ChatMessage) -> None:
        if message.thread_id != self.id:
            raise InvariantViolationError(
                f"Message {message.id} belongs to thread {message.thread_id}, not {self.id}"
            )

    # -- snapshots -----------------------------------------------------------

    def to_snapshot(self) -> dict:
        return {
            "id": str(self.id),
            "org_id": self.org_id,
            "property": self.property.to_dict() if self.property else None,
            "contact_id": self.contact_id,
            "created_by": self.created_by,
            "created_at": format_timestamp(self.created_at),
            "last_message_at": format_optional_timestamp(self.last_message_at),
            "unread_count": self.unread_count,
            "status": self.status.value,
            "participants": [p.to_snapshot() for p in self._participants.values()],
            "last_message": self.last_message.to_snapshot() if self.last_message else None,
        }

    @classmethod
    def restore(cls, snapshot: dict) -> ChatThread:
        property_data = snapshot.get("property")
        last_message = snapshot.get("last_message")
        return cls(
            id=UniqueEntityID(snapshot["id"]),
            org_id=snapshot.get("org_id"),
            property=ThreadPropertySnapshot.from_dict(property_data) if property_data else None,
            contact_id=snapshot.get("contact_id"),
            created_by=snapshot.get("created_by"),
            created_at=parse_timestamp(snapshot["created_at"]),
            last_message_at=parse_optional_timestamp(snapshot.get("last_message_at")),
            unread_count=snapshot.get("unread_count", 0),
            status=ThreadStatus(snapshot.get("status", ThreadStatus.OPEN.value)),
            last_message=ChatMessage.restore(last_message) if last_message else None,
            initial_participants=[
                Participant.restore(p) for p in snapshot.get("participants", [])
            ],
        )
