from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from app.jobs.sync.types import CanonicalRow

CONFLICT_KEY = ("city_id", "date")

# readings outside this range are sensor faults, not air
MIN_VALID_PM25 = 0.0
MAX_VALID_PM25 = 1000.0


@dataclass(frozen=True)
class CityPM25:
    pm25_avg: float
    pm25_max: float
    stations_reporting: int
    readings: int


def sensor_values(body: dict) -> list[float]:
    values: list[float] = []
    for m in body.get("results") or []:
        if not isinstance(m, dict):
            continue
        v = m.get("value")
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            continue
        if MIN_VALID_PM25 <= v < MAX_VALID_PM25:
            values.append(float(v))
    return values


def aggregate_city(per_sensor: Iterable[list[float]]) -> Optional[CityPM25]:
    all_values: list[float] = []
    stations = 0
    for values in per_sensor:
        if values:
            stations += 1
            all_values.extend(values)

    if not all_values:
        return None

    return CityPM25(
        pm25_avg=round(sum(all_values) / len(all_values), 2),
        pm25_max=round(max(all_values), 2),
        stations_reporting=stations,
        readings=len(all_values),
    )


def city_to_row(city_id: str, day: date, data: CityPM25) -> CanonicalRow:
    return {
        "city_id": city_id,
        "date": day,
        "pm25_avg": data.pm25_avg,
        "pm25_max": data.pm25_max,
        "pm10_avg": None,  # PM10 is not collected yet
        "stations_reporting": data.stations_reporting,
        "source": "openaq",
    }
