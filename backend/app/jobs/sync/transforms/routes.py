from app.jobs.sync.transforms.common import as_datetime, as_float, as_int, as_text, latlng, pick
from app.jobs.sync.types import CanonicalRow

CONFLICT_KEY = ("activity_id",)


def route_to_row(record: dict) -> CanonicalRow:
    """
    Map one /routes/bulk record to an activity_routes row.

      activity_id      <- activity_id, or id
      distance         absent -> 0
      moving_time      absent -> 0
      start/end coords <- start_lat/start_lng, or the start_latlng pair
      everything else  absent -> null
    """
    start_lat, start_lng = latlng(record.get("start_latlng"))
    end_lat, end_lng = latlng(record.get("end_latlng"))

    return {
        "activity_id": as_int(pick(record, "activity_id", "id")),
        "activity_type": as_text(pick(record, "activity_type", "type")),
        "start_date": as_datetime(record.get("start_date")),
        "distance": as_float(record.get("distance"), 0.0),
        "moving_time": as_int(record.get("moving_time"), 0),
        "start_lat": as_float(record.get("start_lat"), start_lat),
        "start_lng": as_float(record.get("start_lng"), start_lng),
        "end_lat": as_float(record.get("end_lat"), end_lat),
        "end_lng": as_float(record.get("end_lng"), end_lng),
        "direction": as_text(record.get("direction")),
        "facility_id": as_int(record.get("facility_id")),
        "company_id": as_int(record.get("company_id")),
        "city_id": as_int(record.get("city_id")),
        "path": record.get("path"),
        "synced_at": as_datetime(record.get("synced_at")),
    }
