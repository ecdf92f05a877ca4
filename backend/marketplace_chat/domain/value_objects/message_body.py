"""
MessageBody Value Object - Trimmed, bounded text of a chat message.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from marketplace_chat.domain.exceptions import ChatErrorCode, DomainValidationError


@dataclass(frozen=True)
class MessageBody:
    value: str

    MAX_LENGTH = 2000

    @classmethod
    def create(cls, raw: Optional[str]) -> MessageBody:
        """Validate user input: trimmed, non-empty, at most MAX_LENGTH characters."""
        text = (raw or "").strip()
        if not text:
            raise DomainValidationError(
                "Message body cannot be empty", ChatErrorCode.MESSAGE_EMPTY
            )
        if len(text) > cls.MAX_LENGTH:
            raise DomainValidationError(
                f"Message body cannot exceed {cls.MAX_LENGTH} characters",
                ChatErrorCode.MESSAGE_TOO_LONG,
                {"length": len(text), "max_length": cls.MAX_LENGTH},
            )
        return cls(text)

    @classmethod
    def from_persistence(cls, raw: Optional[str]) -> Optional[MessageBody]:
        # stored rows are trusted as-is
        return cls(raw) if raw else None

    def __str__(self) -> str:
        return self.value
