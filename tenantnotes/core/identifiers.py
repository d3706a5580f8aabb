import random
import string
import time
from datetime import datetime, timezone
from typing import Optional

_BASE36 = string.digits + string.ascii_lowercase

ID_SUFFIX_LENGTH = 6
INVITE_CODE_LENGTH = 6


def _random_base36(length: int) -> str:
    return "".join(random.choice(_BASE36) for _ in range(length))


def generate_id(now: Optional[datetime] = None) -> str:
    """
    Generate a record id: millisecond epoch timestamp plus a random suffix.

    Unique enough for a single writer; not cryptographically unique.

    Args:
        now: Timestamp to embed (defaults to the current time)

    Returns:
        Id string such as "1767323045678k3j9x0"
    """
    millis = int(now.timestamp() * 1000) if now else int(time.time() * 1000)
    return f"{millis}{_random_base36(ID_SUFFIX_LENGTH)}"


def generate_invite_code() -> str:
    """Generate a short uppercase alphanumeric invite code."""
    return _random_base36(INVITE_CODE_LENGTH).upper()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    """
    Format a datetime as UTC ISO-8601 with millisecond precision.

    Naive datetimes are treated as UTC.

    Args:
        value: Datetime to format

    Returns:
        String like "2026-01-02T03:04:05.678Z"
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def parse_iso(value: str) -> datetime:
    """Parse a timestamp written by to_iso (or any ISO-8601 string)."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
