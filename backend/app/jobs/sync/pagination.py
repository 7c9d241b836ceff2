import logging
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Optional

from app.jobs.sync.errors import UpstreamMalformed
from app.jobs.sync.http import UpstreamClient
from app.jobs.sync.types import UpstreamPage

logger = logging.getLogger(__name__)


def unwrap_envelope(body: dict) -> dict:
    """Core API responses sometimes arrive as {"success": true, "data": {...}}."""
    data = body.get("data")
    return data if isinstance(data, dict) else body


def parse_page(body: dict, *, records_key: str, requested_page: int, path: str) -> UpstreamPage:
    payload = unwrap_envelope(body)
    meta = payload.get("pagination") if isinstance(payload.get("pagination"), dict) else payload

    records = payload.get(records_key)
    if records is None:
        records = []
    if not isinstance(records, list):
        raise UpstreamMalformed(f"{path}: '{records_key}' is {type(records).__name__}, expected list", path=path)

    page = _as_int(meta.get("page")) or requested_page
    total_pages = _as_int(meta.get("total_pages"))
    if total_pages is None:
        # no metadata: the upstream sent everything in one go
        total_pages = page

    return UpstreamPage(
        records=[r for r in records if isinstance(r, dict)],
        page=page,
        per_page=_as_int(meta.get("per_page")),
        total_pages=total_pages,
        total_count=_as_int(meta.get("total_count")),
    )


def should_fetch_next(page: UpstreamPage) -> bool:
    """An empty page always ends the walk, whatever total_pages claims."""
    return len(page.records) > 0 and page.page < page.total_pages


async def iter_pages(
    client: UpstreamClient,
    path: str,
    *,
    records_key: str,
    per_page: int,
    params: Optional[dict[str, Any]] = None,
    max_pages: int = 500,
) -> AsyncIterator[UpstreamPage]:
    for page_no in range(1, max_pages + 1):
        body = await client.get_json(path, {**(params or {}), "page": page_no, "per_page": per_page})
        page = parse_page(body, records_key=records_key, requested_page=page_no, path=path)

        logger.info(
            "%s page %d/%d records=%d total_count=%s",
            path,
            page.page,
            page.total_pages,
            len(page.records),
            page.total_count,
        )
        yield page

        if not should_fetch_next(page):
            return

    logger.warning("%s stopped at max_pages=%d before upstream reported the last page", path, max_pages)


async def fetch_all(
    client: UpstreamClient,
    path: str,
    *,
    records_key: str,
    per_page: int,
    params: Optional[dict[str, Any]] = None,
    max_pages: int = 500,
) -> tuple[list[dict], int]:
    """Drain every page of one domain. Returns (records, pages_fetched)."""
    synced_at = datetime.now(timezone.utc)
    records: list[dict] = []
    pages = 0

    async for page in iter_pages(
        client,
        path,
        records_key=records_key,
        per_page=per_page,
        params=params,
        max_pages=max_pages,
    ):
        pages += 1
        records.extend({**r, "synced_at": synced_at} for r in page.records)

    logger.info("%s complete: pages=%d records=%d", path, pages, len(records))
    return records, pages


def _as_int(value) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
