"""
Participant Entity - A platform user or an external contact attached to a thread.

Participants are rebuilt from profile/contact data on every read; the only
mutation they support is mark_seen.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from marketplace_chat.domain.clock import (
    ensure_utc,
    format_optional_timestamp,
    parse_optional_timestamp,
    utc_now,
)
from marketplace_chat.domain.enums import ParticipantType
from marketplace_chat.domain.exceptions import InvariantViolationError

_IMMUTABLE_FIELDS = ("id", "type")


@dataclass
class Participant:
    id: str
    type: ParticipantType
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    last_seen_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.id:
            raise ValueError("Participant id cannot be empty")
        self.type = ParticipantType(self.type)
        if self.last_seen_at is not None:
            self.last_seen_at = ensure_utc(self.last_seen_at)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in _IMMUTABLE_FIELDS and name in self.__dict__:
            current = self.__dict__[name]
            if name == "type":
                value = ParticipantType(value)
            if value != current:
                raise InvariantViolationError(
                    f"Participant {name} cannot change after creation"
                )
        super().__setattr__(name, value)

    @property
    def is_user(self) -> bool:
        return self.type is ParticipantType.USER

    @property
    def is_contact(self) -> bool:
        return self.type is ParticipantType.CONTACT

    def mark_seen(self, at: Optional[datetime] = None) -> None:
        self.last_seen_at = ensure_utc(at) if at else utc_now()

    def to_snapshot(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "display_name": self.display_name,
            "avatar_url": self.avatar_url,
            "email": self.email,
            "phone": self.phone,
            "last_seen_at": format_optional_timestamp(self.last_seen_at),
        }

    @classmethod
    def restore(cls, snapshot: dict) -> Participant:
        return cls(
            id=snapshot["id"],
            type=ParticipantType(snapshot["type"]),
            display_name=snapshot.get("display_name"),
            avatar_url=snapshot.get("avatar_url"),
            email=snapshot.get("email"),
            phone=snapshot.get("phone"),
            last_seen_at=parse_optional_timestamp(snapshot.get("last_seen_at")),
        )
