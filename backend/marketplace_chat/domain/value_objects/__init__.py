"""
VALUE OBJECTS - Immutable domain types

Each value object:
- Is compared by value
- Is immutable (frozen dataclass)
- Validates itself on creation
"""

from marketplace_chat.domain.value_objects.unique_entity_id import UniqueEntityID
from marketplace_chat.domain.value_objects.message_body import MessageBody

__all__ = [
    "UniqueEntityID",
    "MessageBody",
]
