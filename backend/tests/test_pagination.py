"""
Tests for app.jobs.sync.pagination: the sequential page walker.

Covers:
  - should_fetch_next(): both stop conditions as a pure predicate
  - iter_pages()/fetch_all(): exact call counts for "total_pages reached" and
    "empty page" termination, the max_pages ceiling, envelopes without metadata
  - synced_at annotation on every accumulated record
"""

from __future__ import annotations

from datetime import datetime

import httpx
import pytest

from app.jobs.sync.errors import UpstreamMalformed
from app.jobs.sync.pagination import fetch_all, parse_page, should_fetch_next
from app.jobs.sync.types import UpstreamPage


def _page(n_records: int, page: int, total_pages: int) -> UpstreamPage:
    return UpstreamPage(
        records=[{"activity_id": i} for i in range(n_records)],
        page=page,
        per_page=n_records,
        total_pages=total_pages,
        total_count=None,
    )


class PagedUpstream:
    """Serves ``pages[n-1]`` for ?page=n, claiming ``total_pages`` on every page."""

    def __init__(self, pages: list[list[dict]], total_pages: int):
        self.pages = pages
        self.total_pages = total_pages
        self.calls: list[int] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        page = int(request.url.params["page"])
        self.calls.append(page)
        records = self.pages[page - 1] if page <= len(self.pages) else []
        return httpx.Response(
            200,
            json={
                "page": page,
                "per_page": 2,
                "total_pages": self.total_pages,
                "total_count": sum(len(p) for p in self.pages),
                "routes": records,
            },
        )


def _drain(**kwargs):
    async def fn(client):
        return await fetch_all(client, "/api/v1/routes/bulk", records_key="routes", per_page=2, **kwargs)

    return fn


def _records(n: int, offset: int = 0) -> list[dict]:
    return [{"activity_id": offset + i} for i in range(n)]


# ── should_fetch_next ─────────────────────────────────────────────────────────

class TestShouldFetchNext:
    def test_more_pages_with_records(self):
        assert should_fetch_next(_page(2, page=1, total_pages=3)) is True

    def test_last_page_stops(self):
        assert should_fetch_next(_page(2, page=3, total_pages=3)) is False

    def test_past_last_page_stops(self):
        assert should_fetch_next(_page(2, page=4, total_pages=3)) is False

    def test_empty_page_stops_even_if_more_claimed(self):
        assert should_fetch_next(_page(0, page=1, total_pages=10)) is False


# ── fetch_all ─────────────────────────────────────────────────────────────────

class TestFetchAll:
    def test_stops_when_total_pages_reached(self, upstream):
        n = 4
        pages = [_records(2, offset=2 * i) for i in range(n)]
        server = PagedUpstream(pages, total_pages=n)

        records, fetched = upstream(server, _drain())

        assert server.calls == [1, 2, 3, 4]
        assert fetched == n
        assert [r["activity_id"] for r in records] == list(range(8))

    def test_stops_on_empty_page_despite_total_pages(self, upstream):
        n = 3
        pages = [_records(2, offset=2 * i) for i in range(n)]
        server = PagedUpstream(pages, total_pages=n + 5)

        records, fetched = upstream(server, _drain())

        assert server.calls == [1, 2, 3, 4]
        assert fetched == n + 1
        assert len(records) == 6

    def test_first_page_empty(self, upstream):
        server = PagedUpstream([], total_pages=7)
        records, fetched = upstream(server, _drain())
        assert server.calls == [1]
        assert records == []
        assert fetched == 1

    def test_max_pages_bounds_misreporting_upstream(self, upstream):
        # never empty, total_pages always ahead of the cursor
        server = PagedUpstream([_records(2)] * 100, total_pages=1000)
        records, fetched = upstream(server, _drain(max_pages=5))
        assert server.calls == [1, 2, 3, 4, 5]
        assert fetched == 5
        assert len(records) == 10

    def test_date_params_forwarded_on_every_page(self, upstream):
        seen = []

        def handler(request):
            seen.append(dict(request.url.params))
            page = int(request.url.params["page"])
            return httpx.Response(200, json={"page": page, "total_pages": 2, "routes": [{"activity_id": page}]})

        upstream(handler, _drain(params={"start_date": "2026-01-01", "end_date": "2026-03-31"}))
        assert len(seen) == 2
        for params in seen:
            assert params["start_date"] == "2026-01-01"
            assert params["end_date"] == "2026-03-31"
            assert params["per_page"] == "2"

    def test_records_annotated_with_synced_at(self, upstream):
        server = PagedUpstream([_records(2), _records(1, offset=2)], total_pages=2)
        records, _ = upstream(server, _drain())
        stamps = {r["synced_at"] for r in records}
        assert len(stamps) == 1
        assert isinstance(stamps.pop(), datetime)


# ── parse_page ────────────────────────────────────────────────────────────────

class TestParsePage:
    def test_missing_metadata_is_single_page(self):
        page = parse_page({"routes": [{"activity_id": 1}]}, records_key="routes", requested_page=1, path="/r")
        assert page.page == 1
        assert page.total_pages == 1
        assert should_fetch_next(page) is False

    def test_data_envelope_unwrapped(self):
        body = {
            "success": True,
            "data": {"routes": [{"activity_id": 1}], "pagination": {"page": 1, "total_pages": 3, "total_count": 5}},
        }
        page = parse_page(body, records_key="routes", requested_page=1, path="/r")
        assert page.total_pages == 3
        assert page.total_count == 5
        assert len(page.records) == 1

    def test_missing_records_key_is_empty(self):
        page = parse_page({"page": 1, "total_pages": 4}, records_key="routes", requested_page=1, path="/r")
        assert page.records == []
        assert should_fetch_next(page) is False

    def test_non_list_records_is_malformed(self):
        with pytest.raises(UpstreamMalformed):
            parse_page({"routes": {"oops": 1}}, records_key="routes", requested_page=1, path="/r")
