import asyncio
import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from app.jobs.sync.errors import UpstreamError, UpstreamMalformed
from app.jobs.sync.http import UpstreamClient
from app.jobs.sync.pagination import unwrap_envelope
from app.jobs.sync.results import JobResultAggregator
from app.jobs.sync.sources.base import BaseSyncJob
from app.jobs.sync.transforms.facilities import decode_records, records_or_empty
from app.jobs.sync.transforms.stats import (
    DAILY_STAT_CONFLICT_KEY,
    LEADERBOARD_CONFLICT_KEY,
    leaderboard_to_row,
    overall_to_daily_stat,
)
from app.jobs.sync.types import DomainFailed
from app.jobs.sync.utils.time import utc_today
from app.models.daily_stats import DailyStat
from app.models.leaderboards import LeaderboardEntry

logger = logging.getLogger(__name__)

OVERALL_PATH = "/statistics/overall"
LEADERBOARD_PATH = "/api/v1/leaderboard"


class StatsSyncJob(BaseSyncJob):
    """Global impact totals (one daily_stats row per UTC day) and the company leaderboard."""

    name = "stats"

    def __init__(self, core: UpstreamClient, *, day: Optional[date] = None, **kwargs):
        super().__init__(**kwargs)
        self.core = core
        self.day = day or utc_today()

    async def run(self, db: Session) -> JobResultAggregator:
        result = JobResultAggregator(self.name)
        result.meta["date"] = self.day.isoformat()

        overall, leaderboard = await asyncio.gather(
            self.core.get_json(OVERALL_PATH),
            self.core.get_json(LEADERBOARD_PATH, expect=(dict, list)),
            return_exceptions=True,
        )

        if isinstance(overall, UpstreamError):
            result.add(DomainFailed(domain="daily_stats", error=overall))
        elif isinstance(overall, BaseException):
            raise overall
        else:
            stats = overall.get("overall_statistics") or unwrap_envelope(overall).get("overall_statistics")
            if not isinstance(stats, dict):
                err = UpstreamMalformed(f"{OVERALL_PATH}: missing overall_statistics object", path=OVERALL_PATH)
                result.add(DomainFailed(domain="daily_stats", error=err))
            else:
                result.add(
                    await self.write(
                        db,
                        domain="daily_stats",
                        model=DailyStat,
                        rows=[overall_to_daily_stat(stats, day=self.day)],
                        conflict_key=DAILY_STAT_CONFLICT_KEY,
                    )
                )

        if isinstance(leaderboard, UpstreamError):
            result.add(DomainFailed(domain="leaderboards", error=leaderboard))
        elif isinstance(leaderboard, BaseException):
            raise leaderboard
        else:
            records = records_or_empty(decode_records(leaderboard, "leaderboard"), domain="leaderboards")
            result.add(
                await self.write(
                    db,
                    domain="leaderboards",
                    model=LeaderboardEntry,
                    rows=[leaderboard_to_row(r) for r in records],
                    conflict_key=LEADERBOARD_CONFLICT_KEY,
                )
            )

        logger.info("Stats sync done: %s", result.to_response())
        return result
