from datetime import UTC, datetime
from typing import Annotated

from pydantic import AfterValidator


def utc_naive_now() -> datetime:
    """Naive UTC for TIMESTAMP WITHOUT TIME ZONE columns."""
    return datetime.now(UTC).replace(tzinfo=None)


def normalize_time(value: str) -> str:
    """Canonical "HH:MM" for slot times; accepts "H:MM" and "HH:MM:SS" input."""
    parts = value.strip().split(":")
    if len(parts) not in (2, 3) or not all(p.isdigit() for p in parts):
        raise ValueError("time must be formatted as HH:MM")
    hour, minute = int(parts[0]), int(parts[1])
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError("time out of range")
    return f"{hour:02d}:{minute:02d}"


TimeOfDay = Annotated[str, AfterValidator(normalize_time)]
