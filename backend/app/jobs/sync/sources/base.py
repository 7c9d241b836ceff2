import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

from sqlalchemy.orm import Session

from app.jobs.sync.errors import StorageWriteFailed
from app.jobs.sync.loader import BATCH_SIZE, upsert_rows
from app.jobs.sync.results import JobResultAggregator
from app.jobs.sync.types import CanonicalRow, DomainFailed, DomainResult, DomainSynced

logger = logging.getLogger(__name__)


class BaseSyncJob(ABC):
    name: str = ""

    def __init__(self, *, batch_size: int = BATCH_SIZE):
        self.batch_size = batch_size

    @abstractmethod
    async def run(self, db: Session) -> JobResultAggregator:
        """
        Implement fetch -> transform -> upsert. Return the aggregated per-domain result.
        """
        raise NotImplementedError

    async def write(
        self,
        db: Session,
        *,
        domain: str,
        model,
        rows: Sequence[CanonicalRow],
        conflict_key: Sequence[str],
        meta: Optional[dict[str, Any]] = None,
    ) -> DomainResult:
        # the session is only ever used from one thread at a time
        try:
            stats = await asyncio.to_thread(
                upsert_rows,
                db,
                model,
                rows,
                conflict_key,
                batch_size=self.batch_size,
                domain=domain,
            )
        except StorageWriteFailed as e:
            return DomainFailed(domain=domain, error=e, committed=e.committed)
        return DomainSynced(domain=domain, count=stats.written, skipped=stats.skipped, meta=meta or {})
