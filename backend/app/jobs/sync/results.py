import logging
from typing import Any

from app.jobs.sync.errors import SyncError
from app.jobs.sync.types import DomainFailed, DomainResult, DomainSynced

logger = logging.getLogger(__name__)


class JobResultAggregator:
    """
    Folds per-domain outcomes into one response. A failed domain keeps the
    count it actually committed next to its error, so a partial run is never
    reported as a clean success or as a total loss.
    """

    def __init__(self, job: str):
        self.job = job
        self.synced: dict[str, int] = {}
        self.skipped: dict[str, int] = {}
        self.errors: dict[str, str] = {}
        self.meta: dict[str, Any] = {}

    def add(self, result: DomainResult) -> None:
        if isinstance(result, DomainSynced):
            self.synced[result.domain] = result.count
            if result.skipped:
                self.skipped[result.domain] = result.skipped
            self.meta.update(result.meta)
        elif isinstance(result, DomainFailed):
            self.synced[result.domain] = result.committed
            self.note_error(result.domain, result.error)
        else:
            raise TypeError(f"unhandled domain result {result!r}")

    def note_error(self, key: str, error: SyncError) -> None:
        logger.error("%s: %s failed: %s", self.job, key, error.message)
        self.errors[key] = error.message

    @property
    def success(self) -> bool:
        return not self.errors

    @property
    def status_code(self) -> int:
        return 200 if self.success else 500

    def to_response(self) -> dict[str, Any]:
        body: dict[str, Any] = {"success": self.success, "synced": dict(self.synced), **self.meta}
        if self.skipped:
            body["skipped"] = dict(self.skipped)
        if self.errors:
            body["errors"] = dict(self.errors)
            body["error"] = "; ".join(f"{k}: {v}" for k, v in self.errors.items())
        return body
