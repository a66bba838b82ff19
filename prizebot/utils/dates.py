# prizebot/utils/dates.py
from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    """
    Naive UTC timestamp; every DateTime column here is timezone=False UTC.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def parse_dt(raw: str | None) -> datetime | None:
    """
    "2026-12-01" or ISO-8601 ("2026-12-01T10:00:00+02:00") -> naive UTC.
    """
    if raw is None or not str(raw).strip():
        return None
    return to_naive_utc(datetime.fromisoformat(str(raw).strip()))


def fmt_day(dt: datetime) -> str:
    return dt.strftime("%Y-%m-%d")
