import asyncio
import logging

from sqlalchemy.orm import Session

from app.jobs.sync.errors import UpstreamError
from app.jobs.sync.http import UpstreamClient
from app.jobs.sync.results import JobResultAggregator
from app.jobs.sync.sources.base import BaseSyncJob
from app.jobs.sync.transforms.facilities import (
    CONFLICT_KEY,
    company_to_row,
    decode_records,
    facility_to_row,
    records_or_empty,
)
from app.jobs.sync.types import DomainFailed
from app.models.companies import Company
from app.models.facilities import Facility

logger = logging.getLogger(__name__)

# domain -> (path, records key, transformer, model)
DOMAINS = {
    "companies": ("/api/v1/companies", "companies", company_to_row, Company),
    "facilities": ("/api/v1/facilities", "facilities", facility_to_row, Facility),
}


class FacilitiesSyncJob(BaseSyncJob):
    """Companies and facilities, fetched concurrently and written independently."""

    name = "facilities"

    def __init__(self, core: UpstreamClient, **kwargs):
        super().__init__(**kwargs)
        self.core = core

    async def run(self, db: Session) -> JobResultAggregator:
        result = JobResultAggregator(self.name)

        bodies = await asyncio.gather(
            *(self.core.get_json(path, expect=(dict, list)) for path, _, _, _ in DOMAINS.values()),
            return_exceptions=True,
        )

        for (domain, (path, key, to_row, model)), body in zip(DOMAINS.items(), bodies):
            if isinstance(body, UpstreamError):
                result.add(DomainFailed(domain=domain, error=body))
                continue
            if isinstance(body, BaseException):
                raise body

            records = records_or_empty(decode_records(body, key), domain=domain)
            logger.info("%s: %d record(s) from %s", domain, len(records), path)
            result.add(
                await self.write(
                    db,
                    domain=domain,
                    model=model,
                    rows=[to_row(r) for r in records],
                    conflict_key=CONFLICT_KEY,
                )
            )

        logger.info("Facilities sync done: %s", result.to_response())
        return result
