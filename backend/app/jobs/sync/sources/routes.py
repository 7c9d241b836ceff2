import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from app.jobs.sync.errors import UpstreamError
from app.jobs.sync.http import UpstreamClient
from app.jobs.sync.pagination import fetch_all
from app.jobs.sync.results import JobResultAggregator
from app.jobs.sync.sources.base import BaseSyncJob
from app.jobs.sync.transforms.routes import CONFLICT_KEY, route_to_row
from app.jobs.sync.types import DomainFailed, SyncJob
from app.jobs.sync.utils.time import lookback_window
from app.models.activity_routes import ActivityRoute

logger = logging.getLogger(__name__)

ROUTES_PATH = "/api/v1/routes/bulk"
DOMAIN = "activity_routes"


class RoutesSyncJob(BaseSyncJob):
    """
    Activity routes from the core backend, paginated over a date window:
      - GET /api/v1/routes/bulk?start_date&end_date&page&per_page until exhausted
      - upsert into activity_routes on activity_id
    """

    name = "routes"

    def __init__(
        self,
        core: UpstreamClient,
        *,
        lookback_days: int = 90,
        per_page: int = 200,
        max_pages: int = 500,
        start: Optional[date] = None,
        end: Optional[date] = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.core = core
        self.per_page = per_page
        self.max_pages = max_pages
        self.start, self.end = lookback_window(days=lookback_days, start=start, end=end)

    @classmethod
    def for_job(cls, core: UpstreamClient, job: SyncJob, *, lookback_days: int, per_page: int, **kwargs):
        return cls(
            core,
            lookback_days=job.days or lookback_days,
            per_page=job.per_page or per_page,
            start=job.start,
            end=job.end,
            **kwargs,
        )

    async def run(self, db: Session) -> JobResultAggregator:
        result = JobResultAggregator(self.name)
        result.meta.update({"start_date": self.start.isoformat(), "end_date": self.end.isoformat()})

        logger.info(
            "Routes sync start %s..%s per_page=%d max_pages=%d",
            self.start.isoformat(),
            self.end.isoformat(),
            self.per_page,
            self.max_pages,
        )

        try:
            records, pages = await fetch_all(
                self.core,
                ROUTES_PATH,
                records_key="routes",
                per_page=self.per_page,
                params={"start_date": self.start.isoformat(), "end_date": self.end.isoformat()},
                max_pages=self.max_pages,
            )
        except UpstreamError as e:
            result.add(DomainFailed(domain=DOMAIN, error=e))
            return result

        rows = [route_to_row(r) for r in records]
        result.add(
            await self.write(
                db,
                domain=DOMAIN,
                model=ActivityRoute,
                rows=rows,
                conflict_key=CONFLICT_KEY,
                meta={"pages_fetched": pages},
            )
        )
        logger.info("Routes sync done: %s", result.to_response())
        return result
