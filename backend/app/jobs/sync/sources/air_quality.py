import asyncio
import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from app.jobs.sync.errors import UpstreamError
from app.jobs.sync.http import UpstreamClient
from app.jobs.sync.results import JobResultAggregator
from app.jobs.sync.sources.air_quality_cities import CITY_PM25_SENSORS
from app.jobs.sync.sources.base import BaseSyncJob
from app.jobs.sync.transforms.air_quality import (
    CONFLICT_KEY,
    CityPM25,
    aggregate_city,
    city_to_row,
    sensor_values,
)
from app.jobs.sync.utils.time import prior_utc_day, utc_day_bounds
from app.models.air_quality_daily import AirQualityDaily

logger = logging.getLogger(__name__)

DOMAIN = "air_quality"
MEASUREMENTS_LIMIT = 1000


class AirQualitySyncJob(BaseSyncJob):
    """
    Daily PM2.5 per city from OpenAQ:
      - GET /sensors/{id}/measurements for every configured sensor, all cities at once
      - one air_quality_daily row per city that reported anything, keyed on (city_id, date)
    """

    name = "air_quality"

    def __init__(
        self,
        openaq: UpstreamClient,
        *,
        day: Optional[date] = None,
        cities: Optional[dict[str, list[int]]] = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.openaq = openaq
        self.day = day or prior_utc_day()
        self.cities = CITY_PM25_SENSORS if cities is None else cities

    async def fetch_sensor(self, sensor_id: int) -> list[float]:
        date_from, date_to = utc_day_bounds(self.day)
        body = await self.openaq.get_json(
            f"/sensors/{sensor_id}/measurements",
            {
                "datetime_from": date_from.isoformat(),
                "datetime_to": date_to.isoformat(),
                "limit": MEASUREMENTS_LIMIT,
            },
        )
        return sensor_values(body)

    async def fetch_city(self, city_id: str) -> tuple[Optional[CityPM25], dict[int, UpstreamError]]:
        """
        Aggregate every sensor that answered. A failing sensor (retired, rate
        limited) is returned alongside the aggregate instead of sinking the city.
        """
        sensor_ids = self.cities.get(city_id) or []
        if not sensor_ids:
            logger.info("%s: no PM2.5 sensors configured, skipping", city_id)
            return None, {}

        fetched = await asyncio.gather(*(self.fetch_sensor(s) for s in sensor_ids), return_exceptions=True)

        per_sensor: list[list[float]] = []
        failed: dict[int, UpstreamError] = {}
        for sensor_id, values in zip(sensor_ids, fetched):
            if isinstance(values, UpstreamError):
                failed[sensor_id] = values
                continue
            if isinstance(values, BaseException):
                raise values
            per_sensor.append(values)

        if failed:
            logger.warning("%s: %d/%d sensor(s) failed", city_id, len(failed), len(sensor_ids))
        return aggregate_city(per_sensor), failed

    async def run(self, db: Session) -> JobResultAggregator:
        result = JobResultAggregator(self.name)
        result.meta["date"] = self.day.isoformat()

        city_ids = list(self.cities)
        fetched = await asyncio.gather(*(self.fetch_city(c) for c in city_ids), return_exceptions=True)

        cities: dict[str, Optional[dict]] = {}
        rows = []
        for city_id, outcome in zip(city_ids, fetched):
            if isinstance(outcome, BaseException):
                raise outcome
            data, failed = outcome
            for sensor_id, err in failed.items():
                result.note_error(f"{DOMAIN}.{city_id}.{sensor_id}", err)
            if data is None:
                cities[city_id] = None
                continue
            rows.append(city_to_row(city_id, self.day, data))
            cities[city_id] = {"pm25Avg": data.pm25_avg, "stationsReporting": data.stations_reporting}

        result.meta["cities"] = cities
        result.add(
            await self.write(
                db,
                domain=DOMAIN,
                model=AirQualityDaily,
                rows=rows,
                conflict_key=CONFLICT_KEY,
            )
        )
        logger.info("Air quality sync %s: rows=%d errors=%d", self.day.isoformat(), len(rows), len(result.errors))
        return result
