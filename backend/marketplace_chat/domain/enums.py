"""Enumerations shared by the chat domain."""

from enum import Enum


class SenderType(str, Enum):
    USER = "user"
    CONTACT = "contact"
    SYSTEM = "system"


class ParticipantType(str, Enum):
    USER = "user"
    CONTACT = "contact"


class MessageStatus(str, Enum):
    SENT = "sent"
    DELIVERED = "delivered"
    READ = "read"


class ThreadStatus(str, Enum):
    OPEN = "open"
    ARCHIVED = "archived"


class ThreadAudience(str, Enum):
    LISTER = "lister"
    CLIENT = "client"


def counterpart_of(participant_type: ParticipantType) -> ParticipantType:
    """user <-> contact"""
    if ParticipantType(participant_type) is ParticipantType.USER:
        return ParticipantType.CONTACT
    return ParticipantType.USER
