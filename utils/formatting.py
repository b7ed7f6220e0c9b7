"""Human-readable formatting helpers shared by the scanner, the cleanup manager and the API."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def format_bytes(num_bytes: int) -> str:
    """1048576 -> '1 MB', 1536 -> '1.5 KB', 12 -> '12 bytes'."""
    num_bytes = int(num_bytes)
    if num_bytes >= 1_048_576:
        return f"{_trim(round(num_bytes / 1_048_576, 2))} MB"
    if num_bytes >= 1024:
        return f"{_trim(round(num_bytes / 1024, 2))} KB"
    return f"{num_bytes} bytes"


def _trim(value: float) -> str:
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return text or "0"


def format_number(value) -> str:
    return f"{int(value):,}"


def pluralize(count: int, singular: str, plural: Optional[str] = None) -> str:
    """'1 item found' / '3 items found' style counts."""
    word = singular if count == 1 else (plural or f"{singular}s")
    return f"{count} {word}"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def human_time_diff(since: datetime, now: Optional[datetime] = None) -> str:
    """Coarse age of a timestamp: '45 secs', '1 min', '3 hours', '2 days'."""
    now = now or utc_now()
    if since.tzinfo is None:
        since = since.replace(tzinfo=timezone.utc)
    seconds = max(int((now - since).total_seconds()), 0)

    if seconds < 60:
        return pluralize(max(seconds, 1), "sec")
    minutes = round(seconds / 60)
    if minutes < 60:
        return pluralize(minutes, "min")
    hours = round(seconds / 3600)
    if hours < 24:
        return pluralize(hours, "hour")
    days = round(seconds / 86400)
    if days < 7:
        return pluralize(days, "day")
    weeks = round(seconds / 604800)
    if days < 30:
        return pluralize(weeks, "week")
    months = round(seconds / 2_592_000)
    if days < 365:
        return pluralize(max(months, 1), "month")
    return pluralize(round(seconds / 31_536_000), "year")
