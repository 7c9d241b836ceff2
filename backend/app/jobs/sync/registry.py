from typing import Any, Optional

from app.core.config import Settings
from app.jobs.sync.errors import PayloadInvalid
from app.jobs.sync.http import UpstreamClient
from app.jobs.sync.sources.air_quality import AirQualitySyncJob
from app.jobs.sync.sources.base import BaseSyncJob
from app.jobs.sync.sources.facilities import FacilitiesSyncJob
from app.jobs.sync.sources.routes import RoutesSyncJob
from app.jobs.sync.sources.safety import SafetySyncJob, parse_safety_payload
from app.jobs.sync.sources.stats import StatsSyncJob
from app.jobs.sync.types import SyncJob

JOBS = {
    job.name: job
    for job in (RoutesSyncJob, StatsSyncJob, FacilitiesSyncJob, AirQualitySyncJob, SafetySyncJob)
}

# which upstream each job reads from; safety takes a posted payload instead
UPSTREAM_FOR_JOB = {
    "routes": "core",
    "stats": "core",
    "facilities": "core",
    "air_quality": "openaq",
    "safety": None,
}


def build_job(
    job: SyncJob,
    settings: Settings,
    *,
    client: Optional[UpstreamClient] = None,
    payload: Any = None,
) -> BaseSyncJob:
    """Turn one invocation's SyncJob into a runnable job with configured defaults."""
    if job.domain not in JOBS:
        raise PayloadInvalid(f"unknown sync job {job.domain!r}")

    common = {"batch_size": settings.batch_size}
    if job.domain == "routes":
        return RoutesSyncJob.for_job(
            client,
            job,
            lookback_days=settings.routes_lookback_days,
            per_page=settings.routes_per_page,
            max_pages=settings.max_pages,
            **common,
        )
    if job.domain == "stats":
        return StatsSyncJob(client, day=job.day, **common)
    if job.domain == "facilities":
        return FacilitiesSyncJob(client, **common)
    if job.domain == "air_quality":
        return AirQualitySyncJob(client, day=job.day, **common)
    return SafetySyncJob(parse_safety_payload(payload), **common)
