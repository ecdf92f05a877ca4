"""
ChatMessage Entity - One message in a thread.

Status is derived from the timestamps, never stored:
    sent (no delivered_at) -> delivered (delivered_at, no read_at) -> read (read_at)

Timestamps only move forward: once delivered_at/read_at are set they cannot
be unset, and neither may precede created_at.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from marketplace_chat.domain.clock import (
    ensure_utc,
    format_optional_timestamp,
    format_timestamp,
    parse_optional_timestamp,
    parse_timestamp,
    utc_now,
)
from marketplace_chat.domain.enums import MessageStatus, ParticipantType, SenderType
from marketplace_chat.domain.exceptions import InvariantViolationError
from marketplace_chat.domain.value_objects import MessageBody, UniqueEntityID

_MONOTONIC_FIELDS = ("delivered_at", "read_at")


@dataclass
class ChatMessage:
    id: UniqueEntityID
    thread_id: UniqueEntityID
    sender_type: SenderType
    sender_id: Optional[str]
    body: Optional[MessageBody]
    created_at: datetime
    payload: Optional[dict[str, Any]] = None
    delivered_at: Optional[datetime] = None
    read_at: Optional[datetime] = None

    def __post_init__(self):
        try:
            self.sender_type = SenderType(self.sender_type)
        except ValueError:
            raise ValueError(f"Invalid sender type: {self.sender_type}")
        self.created_at = ensure_utc(self.created_at)
        if self.delivered_at is not None:
            self.delivered_at = ensure_utc(self.delivered_at)
        if self.read_at is not None:
            self.read_at = ensure_utc(self.read_at)
        self._check_invariants()

    def __setattr__(self, name: str, value: Any) -> None:
        if (
            name in _MONOTONIC_FIELDS
            and value is None
            and self.__dict__.get(name) is not None
        ):
            raise InvariantViolationError(f"{name} cannot be unset once recorded")
        super().__setattr__(name, value)

    @classmethod
    def create(
        cls,
        thread_id: UniqueEntityID,
        sender_type: SenderType,
        sender_id: Optional[str],
        body: MessageBody,
        payload: Optional[dict[str, Any]] = None,
        created_at: Optional[datetime] = None,
    ) -> ChatMessage:
        """Factory method to create a new message with a generated ID and timestamp."""
        return cls(
            id=UniqueEntityID.generate(),
            thread_id=thread_id,
            sender_type=sender_type,
            sender_id=sender_id,
            body=body,
            payload=payload,
            created_at=created_at or utc_now(),
        )

    @property
    def status(self) -> MessageStatus:
        if self.read_at is not None:
            return MessageStatus.READ
        if self.delivered_at is not None:
            return MessageStatus.DELIVERED
        return MessageStatus.SENT

    def mark_delivered(self, at: Optional[datetime] = None) -> None:
        if self.delivered_at is not None:
            return
        moment = self._not_before_creation(at, "delivered_at")
        self.delivered_at = moment

    def mark_read(self, at: Optional[datetime] = None) -> None:
        moment = self._not_before_creation(at, "read_at")
        if self.delivered_at is None:
            self.delivered_at = moment
        if self.read_at is None or moment > self.read_at:
            self.read_at = moment
        self._check_invariants()

    def is_unread_for(self, reader_type: ParticipantType, reader_id: str) -> bool:
        """Unread for a reader: no read_at, sent by a person, and not sent by the reader."""
        if self.read_at is not None:
            return False
        if self.sender_type is SenderType.SYSTEM:
            return False
        is_own = (
            self.sender_type.value == ParticipantType(reader_type).value
            and self.sender_id == reader_id
        )
        return not is_own

    def to_snapshot(self) -> dict:
        return {
            "id": str(self.id),
            "thread_id": str(self.thread_id),
            "sender_type": self.sender_type.value,
            "sender_id": self.sender_id,
            "body": self.body.value if self.body else None,
            "payload": copy.deepcopy(self.payload),
            "created_at": format_timestamp(self.created_at),
            "delivered_at": format_optional_timestamp(self.delivered_at),
            "read_at": format_optional_timestamp(self.read_at),
        }

    @classmethod
    def restore(cls, snapshot: dict) -> ChatMessage:
        return cls(
            id=UniqueEntityID(snapshot["id"]),
            thread_id=UniqueEntityID(snapshot["thread_id"]),
            sender_type=SenderType(snapshot["sender_type"]),
            sender_id=snapshot.get("sender_id"),
            body=MessageBody.from_persistence(snapshot.get("body")),
            payload=copy.deepcopy(snapshot.get("payload")),
            created_at=parse_timestamp(snapshot["created_at"]),
            delivered_at=parse_optional_timestamp(snapshot.get("delivered_at")),
            read_at=parse_optional_timestamp(snapshot.get("read_at")),
        )

    def _not_before_creation(self, at: Optional[datetime], name: str) -> datetime:
        moment = ensure_utc(at) if at else utc_now()
        if moment < self.created_at:
            raise InvariantViolationError(
                f"{name} ({moment.isoformat()}) precedes created_at "
                f"({self.created_at.isoformat()})"
            )
        return moment

    def _check_invariants(self) -> None:
        if self.delivered_at is not None and self.delivered_at < self.created_at:
            raise InvariantViolationError("delivered_at precedes created_at")
        if self.read_at is not None:
            if self.read_at < self.created_at:
                raise InvariantViolationError("read_at precedes created_at")
            if self.delivered_at is None:
                raise InvariantViolationError("read_at requires delivered_at")
