import argparse
import asyncio
import json
import sys
from contextlib import AsyncExitStack
from pathlib import Path
from typing import Optional

from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.db import SessionLocal, init_db
from app.core.deps import core_config, openaq_config
from app.core.log import configure_logging_if_needed
from app.jobs.sync.http import UpstreamClient, make_client
from app.jobs.sync.registry import JOBS, UPSTREAM_FOR_JOB, build_job
from app.jobs.sync.results import JobResultAggregator
from app.jobs.sync.types import SyncJob
from app.jobs.sync.utils.time import parse_iso_date


async def run(job: SyncJob, db: Session, *, payload=None) -> JobResultAggregator:
    settings = get_settings()
    upstream = UPSTREAM_FOR_JOB[job.domain]

    async with AsyncExitStack() as stack:
        client: Optional[UpstreamClient] = None
        if upstream is not None:
            cfg = core_config(settings) if upstream == "core" else openaq_config(settings)
            http = await stack.enter_async_context(make_client(cfg))
            client = UpstreamClient(cfg, http)
        return await build_job(job, settings, client=client, payload=payload).run(db)


def main():
    p = argparse.ArgumentParser(description="Run one sync job directly, without the HTTP trigger")
    p.add_argument("--job", required=True, choices=JOBS.keys())

    p.add_argument("--start", help="YYYY-MM-DD (routes)")
    p.add_argument("--end", help="YYYY-MM-DD (routes)")
    p.add_argument("--days", type=int, help="Lookback in whole days (routes)")
    p.add_argument("--per-page", type=int, help="Page size override (routes)")
    p.add_argument("--date", help="UTC day YYYY-MM-DD (air_quality, stats)")
    p.add_argument("--payload", type=Path, help="JSON file with {year, cities} (safety)")

    p.add_argument("--create-tables", action="store_true", help="Create missing tables before running")

    args = p.parse_args()
    configure_logging_if_needed(get_settings().log_level)

    if args.job == "safety" and args.payload is None:
        p.error("--payload is required for the safety job")

    job = SyncJob(
        domain=args.job,
        start=parse_iso_date(args.start, name="start"),
        end=parse_iso_date(args.end, name="end"),
        days=args.days,
        per_page=args.per_page,
        day=parse_iso_date(args.date, name="date"),
    )
    payload = json.loads(args.payload.read_text()) if args.payload else None

    if args.create_tables:
        init_db()

    db: Session = SessionLocal()
    try:
        result = asyncio.run(run(job, db, payload=payload))
    finally:
        db.close()

    print(json.dumps(jsonable_encoder(result.to_response()), indent=2))
    if not result.success:
        sys.exit(1)


if __name__ == "__main__":
    main()
