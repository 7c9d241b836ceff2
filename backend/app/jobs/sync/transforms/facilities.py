import logging
from typing import Any

from app.jobs.sync.transforms.common import as_float, as_int, as_text
from app.jobs.sync.types import CanonicalRow, DecodedRecords, NoRecords, RecordList

logger = logging.getLogger(__name__)

CONFLICT_KEY = ("id",)


def decode_records(body: Any, records_key: str) -> DecodedRecords:
    """
    The core API has served both a bare JSON array and an object wrapping the
    list (optionally under "data"). Anything else means the contract moved and
    there is nothing we can safely sync.
    """
    if isinstance(body, list):
        return RecordList([r for r in body if isinstance(r, dict)])

    if isinstance(body, dict):
        for container in (body, body.get("data")):
            if isinstance(container, dict) and isinstance(container.get(records_key), list):
                return RecordList([r for r in container[records_key] if isinstance(r, dict)])
            if container is not body and isinstance(container, list):
                return RecordList([r for r in container if isinstance(r, dict)])
        return NoRecords(f"object without a '{records_key}' list (keys: {sorted(body)[:10]})")

    return NoRecords(f"unexpected {type(body).__name__} body")


def records_or_empty(decoded: DecodedRecords, *, domain: str) -> list[dict]:
    if isinstance(decoded, RecordList):
        return decoded.records
    if isinstance(decoded, NoRecords):
        logger.warning("%s: unrecognized response shape, syncing nothing (%s)", domain, decoded.reason)
        return []
    raise TypeError(f"unhandled decode result {decoded!r}")


def company_to_row(record: dict) -> CanonicalRow:
    return {
        "id": as_int(record.get("id")),
        "name": as_text(record.get("name")),
        "activities": as_int(record.get("activities"), 0),
        "distance": as_float(record.get("distance"), 0.0),
        "emp_count": as_int(record.get("emp_count"), 0),
        "facilities": record.get("facilities"),
    }


def facility_to_row(record: dict) -> CanonicalRow:
    return {
        "id": as_int(record.get("id")),
        "name": as_text(record.get("name")),
        "approved": record.get("approved") is True,
        "activities": as_int(record.get("activities"), 0),
        "distance": as_float(record.get("distance"), 0.0),
        "emp_count": as_int(record.get("emp_count"), 0),
        "city": as_text(record.get("city")),
        "city_id": as_int(record.get("city_id")),
        "latlngs": record.get("latlngs"),
    }
