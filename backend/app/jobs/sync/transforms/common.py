from datetime import date, datetime, timezone
from typing import Any, Optional


def pick(record: dict, *keys: str) -> Any:
    """First non-null value among keys, so renamed upstream fields still map."""
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def as_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        pass
    # "12.0" style strings; float() would round large ids
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default


def as_float(value: Any, default: Optional[float] = None) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def as_datetime(value: Any) -> Optional[datetime]:
    """ISO-8601 string (with or without Z) to an aware UTC datetime."""
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value.strip():
        try:
            dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def as_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def latlng(value: Any) -> tuple[Optional[float], Optional[float]]:
    if isinstance(value, (list, tuple)) and len(value) == 2:
        return as_float(value[0]), as_float(value[1])
    return None, None
