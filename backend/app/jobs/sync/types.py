from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional, Union

from app.jobs.sync.errors import SyncError

CanonicalRow = dict[str, Any]


@dataclass(frozen=True)
class SyncJob:
    domain: str
    start: Optional[date] = None
    end: Optional[date] = None
    per_page: Optional[int] = None      # page size override
    days: Optional[int] = None          # lookback override
    day: Optional[date] = None          # single-day override (air quality)


@dataclass(frozen=True)
class UpstreamPage:
    records: list[dict]
    page: int
    per_page: Optional[int]
    total_pages: int
    total_count: Optional[int]


@dataclass(frozen=True)
class RecordList:
    records: list[dict]


@dataclass(frozen=True)
class NoRecords:
    reason: str

    @property
    def records(self) -> list[dict]:
        return []


DecodedRecords = Union[RecordList, NoRecords]


@dataclass(frozen=True)
class DomainSynced:
    domain: str
    count: int
    skipped: int = 0
    meta: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DomainFailed:
    domain: str
    error: SyncError
    committed: int = 0


DomainResult = Union[DomainSynced, DomainFailed]
