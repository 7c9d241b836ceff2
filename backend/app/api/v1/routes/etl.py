import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.deps import get_core_client, get_db, get_openaq_client, require_cron_secret
from app.jobs.sync.errors import PayloadInvalid
from app.jobs.sync.http import UpstreamClient
from app.jobs.sync.registry import build_job
from app.jobs.sync.results import JobResultAggregator
from app.jobs.sync.types import SyncJob
from app.jobs.sync.utils.time import parse_iso_date

logger = logging.getLogger(__name__)

# router dependencies resolve first: a rejected call opens no upstream client
# and no DB session
router = APIRouter(prefix="/api/etl", tags=["etl"], dependencies=[Depends(require_cron_secret)])


def _respond(result: JobResultAggregator) -> JSONResponse:
    return JSONResponse(status_code=result.status_code, content=jsonable_encoder(result.to_response()))


@router.get("/sync-routes")
async def sync_routes(
    start: Optional[str] = Query(None, description="YYYY-MM-DD"),
    end: Optional[str] = Query(None, description="YYYY-MM-DD"),
    days: Optional[int] = Query(None, ge=1, le=3650, description="Lookback in whole days"),
    per_page: Optional[int] = Query(None, ge=1, le=1000),
    core: UpstreamClient = Depends(get_core_client),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    job = SyncJob(
        domain="routes",
        start=parse_iso_date(start, name="start"),
        end=parse_iso_date(end, name="end"),
        days=days,
        per_page=per_page,
    )
    return _respond(await build_job(job, settings, client=core).run(db))


@router.get("/sync-stats")
async def sync_stats(
    core: UpstreamClient = Depends(get_core_client),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return _respond(await build_job(SyncJob(domain="stats"), settings, client=core).run(db))


@router.get("/sync-facilities")
async def sync_facilities(
    core: UpstreamClient = Depends(get_core_client),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return _respond(await build_job(SyncJob(domain="facilities"), settings, client=core).run(db))


@router.get("/sync-air-quality")
async def sync_air_quality(
    date: Optional[str] = Query(None, description="UTC day YYYY-MM-DD, defaults to yesterday"),
    openaq: UpstreamClient = Depends(get_openaq_client),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    job = SyncJob(domain="air_quality", day=parse_iso_date(date, name="date"))
    return _respond(await build_job(job, settings, client=openaq).run(db))


@router.post("/sync-safety")
async def sync_safety(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    try:
        body = await request.json()
    except ValueError:
        raise PayloadInvalid("Invalid payload: body must be JSON")

    return _respond(await build_job(SyncJob(domain="safety"), settings, payload=body).run(db))
