from datetime import date

from app.jobs.sync.transforms.common import as_float, as_int, as_text, pick
from app.jobs.sync.types import CanonicalRow

DAILY_STAT_CONFLICT_KEY = ("date",)
LEADERBOARD_CONFLICT_KEY = ("company_name",)


def overall_to_daily_stat(overall: dict, *, day: date) -> CanonicalRow:
    # /statistics/overall uses camelCase names from the Rails serializer
    return {
        "date": day,
        "facilities": as_int(overall.get("facilities")),
        "riders": as_int(pick(overall, "riders", "people"), 0),
        "rides": as_int(pick(overall, "rides", "activitiesCount"), 0),
        "distance": as_float(overall.get("distance"), 0.0),
        "co2_saved": as_float(pick(overall, "co2_saved", "co2Offset"), 0.0),
        "petrol_saved": as_float(pick(overall, "petrol_saved", "fuelSaved"), 0.0),
    }


def leaderboard_to_row(record: dict) -> CanonicalRow:
    return {
        "company_name": as_text(pick(record, "company_name", "name")),
        "rank": as_int(record.get("rank")),
        "percentage": as_float(record.get("percentage")),
        "riders": as_int(record.get("riders"), 0),
        "rides": as_int(record.get("rides"), 0),
        "carbon_credits": as_int(record.get("carbon_credits"), 0),
        "city_id": as_int(record.get("city_id")),
    }
