import logging
from typing import Any

from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.api.v1.schemas.etl import SafetyPayload
from app.jobs.sync.errors import PayloadInvalid
from app.jobs.sync.results import JobResultAggregator
from app.jobs.sync.sources.base import BaseSyncJob
from app.jobs.sync.transforms.safety import CONFLICT_KEY, safety_to_row
from app.models.city_safety_annual import CitySafetyAnnual

logger = logging.getLogger(__name__)

DOMAIN = "city_safety_annual"


def parse_safety_payload(body: Any) -> SafetyPayload:
    try:
        return SafetyPayload.model_validate(body)
    except ValidationError as e:
        first = e.errors()[0] if e.errors() else {}
        where = ".".join(str(p) for p in first.get("loc", ()))
        detail = f"{where}: {first.get('msg')}" if where else str(first.get("msg", "invalid"))
        raise PayloadInvalid(f"Invalid payload: need year and cities array ({detail})") from e


class SafetySyncJob(BaseSyncJob):
    """Annual road-safety statistics posted by an operator; no upstream call."""

    name = "safety"

    def __init__(self, payload: SafetyPayload, **kwargs):
        super().__init__(**kwargs)
        self.payload = payload

    async def run(self, db: Session) -> JobResultAggregator:
        result = JobResultAggregator(self.name)
        result.meta["year"] = self.payload.year

        rows = [safety_to_row(c, year=self.payload.year) for c in self.payload.cities]
        logger.info("Safety sync year=%d cities=%d", self.payload.year, len(rows))

        result.add(
            await self.write(
                db,
                domain=DOMAIN,
                model=CitySafetyAnnual,
                rows=rows,
                conflict_key=CONFLICT_KEY,
            )
        )
        if result.success:
            result.meta["upserted"] = result.synced[DOMAIN]
        return result
