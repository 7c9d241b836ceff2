from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from app.jobs.sync.errors import PayloadInvalid


def utc_today(now: Optional[datetime] = None) -> date:
    return (now or datetime.now(timezone.utc)).astimezone(timezone.utc).date()


def lookback_window(
    *,
    days: int,
    start: Optional[date] = None,
    end: Optional[date] = None,
    now: Optional[datetime] = None,
) -> tuple[date, date]:
    """
    Whole-day window ending today (UTC) unless start/end are given.
    An explicit start wins over the lookback.
    """
    if days < 1:
        raise PayloadInvalid(f"lookback days must be >= 1, got {days}")
    end = end or utc_today(now)
    start = start or (end - timedelta(days=days))
    if start > end:
        raise PayloadInvalid(f"start {start.isoformat()} is after end {end.isoformat()}")
    return start, end


def prior_utc_day(now: Optional[datetime] = None) -> date:
    return utc_today(now) - timedelta(days=1)


def utc_day_bounds(day: date) -> tuple[datetime, datetime]:
    """[00:00Z of day, 00:00Z of the next day)."""
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


def parse_iso_date(value: Optional[str], *, name: str) -> Optional[date]:
    if value is None or value == "":
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise PayloadInvalid(f"{name} must be YYYY-MM-DD, got {value!r}")
