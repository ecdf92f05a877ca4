"""
MAPPERS - Pure transforms between DTOs and domain entities

from_domain_x(to_domain_x(dto)) == dto for every valid DTO.
"""

from marketplace_chat.application.mappers.message_mapper import (
    from_domain_message,
    to_domain_message,
)
from marketplace_chat.application.mappers.thread_mapper import (
    from_domain_participant,
    from_domain_thread,
    to_domain_participant,
    to_domain_thread,
)

__all__ = [
    "to_domain_message",
    "from_domain_message",
    "to_domain_participant",
    "from_domain_participant",
    "to_domain_thread",
    "from_domain_thread",
]
