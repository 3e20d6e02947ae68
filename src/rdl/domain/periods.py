from __future__ import annotations

from datetime import date, datetime, tzinfo
from typing import Iterable, Optional

PERIOD_FORMAT = "%Y-%m-%d"


def parse_timestamp(value: str) -> datetime:
    # API timestamps come as "YYYY-MM-DDTHH:MM:SS(.fff)Z" or "YYYY-MM-DD HH:MM:SS"
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text.replace(" ", "T", 1))


def period_key(timestamp: datetime | date | str, tz: Optional[tzinfo] = None) -> str:
    """Calendar-day key for a timestamp, in local time (or ``tz`` when given)."""
    if isinstance(timestamp, str):
        timestamp = parse_timestamp(timestamp)
    if isinstance(timestamp, datetime):
        if timestamp.tzinfo is not None:
            timestamp = timestamp.astimezone(tz)
        return timestamp.date().strftime(PERIOD_FORMAT)
    return timestamp.strftime(PERIOD_FORMAT)


def is_mutable(key: str, current: str) -> bool:
    return key == current


def newest_first(keys: Iterable[str]) -> list[str]:
    return sorted(keys, reverse=True)
