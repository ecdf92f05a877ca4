"""
Time helpers for the chat domain.

All domain timestamps are timezone-aware UTC datetimes. At the boundary they
travel as ISO-8601 strings in one canonical form: 2025-01-27T12:00:00.000000Z
"""

import re
from datetime import datetime, timezone
from typing import Optional

_FRACTION = re.compile(r"\.(\d+)")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Naive datetimes are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: str) -> datetime:
    text = value.strip().replace("Z", "+00:00").replace("z", "+00:00")
    # fromisoformat on older interpreters only takes 3 or 6 fraction digits
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    return ensure_utc(datetime.fromisoformat(text))


def format_timestamp(value: datetime) -> str:
    return ensure_utc(value).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def parse_optional_timestamp(value: Optional[str]) -> Optional[datetime]:
    return parse_timestamp(value) if value else None


def format_optional_timestamp(value: Optional[datetime]) -> Optional[str]:
    return format_timestamp(value) if value else None
