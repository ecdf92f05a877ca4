"""
UniqueEntityID Value Object - UUID-shaped identity for threads, messages and listings.
"""

from dataclasses import dataclass
import re
from uuid import uuid4


@dataclass(frozen=True)
class UniqueEntityID:
    value: str  # canonical 8-4-4-4-12 hex, any case

    _UUID_PATTERN = re.compile(
        r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
    )

    def __post_init__(self):
        if not self.is_valid(self.value):
            raise ValueError(f"Invalid entity id (UUID): {self.value!r}")

    @classmethod
    def is_valid(cls, value: object) -> bool:
        return isinstance(value, str) and bool(cls._UUID_PATTERN.match(value))

    @classmethod
    def generate(cls) -> "UniqueEntityID":
        return cls(str(uuid4()))

    def __str__(self) -> str:
        return self.value
