"""
Tests for app.jobs.sync.http: the upstream client.

Covers:
  - transient failures (network errors, 5xx retry statuses) retried up to the limit
  - non-transient statuses and undecodable bodies raised on the first attempt
  - top-level shape checking through ``expect``
  - credential masking in logged URLs
"""

from __future__ import annotations

import asyncio

import httpx
import pytest

from app.jobs.sync.errors import UpstreamMalformed, UpstreamRejected, UpstreamUnreachable
from app.jobs.sync.http import UpstreamClient, UpstreamConfig, make_client, mask_secret, masked_url


class Recorder:
    def __init__(self, responses):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, Exception):
            raise item
        return item


def _get(path="/api/v1/companies", **kwargs):
    async def fn(client):
        return await client.get_json(path, **kwargs)

    return fn


# ── Retry policy ──────────────────────────────────────────────────────────────

class TestRetry:
    def test_success_first_try(self, upstream):
        rec = Recorder([httpx.Response(200, json={"companies": []})])
        assert upstream(rec, _get()) == {"companies": []}
        assert len(rec.requests) == 1

    def test_retry_status_then_success(self, upstream):
        rec = Recorder([
            httpx.Response(503, text="busy"),
            httpx.Response(502, text="bad gateway"),
            httpx.Response(200, json={"ok": True}),
        ])
        assert upstream(rec, _get()) == {"ok": True}
        assert len(rec.requests) == 3

    def test_network_error_retried_then_exhausted(self, upstream):
        rec = Recorder([httpx.ConnectError("refused")])
        with pytest.raises(UpstreamUnreachable):
            upstream(rec, _get(), retries=3)
        assert len(rec.requests) == 3

    def test_timeout_is_unreachable(self, upstream):
        rec = Recorder([httpx.ReadTimeout("slow")])
        with pytest.raises(UpstreamUnreachable):
            upstream(rec, _get(), retries=2)
        assert len(rec.requests) == 2

    def test_retry_status_exhausted(self, upstream):
        rec = Recorder([httpx.Response(504)])
        with pytest.raises(UpstreamUnreachable) as exc:
            upstream(rec, _get(), retries=3)
        assert "504" in exc.value.message
        assert len(rec.requests) == 3


# ── Non-retryable failures ────────────────────────────────────────────────────

class TestNonRetryable:
    def test_auth_failure_not_retried(self, upstream):
        rec = Recorder([httpx.Response(401, json={"error": "bad token"})])
        with pytest.raises(UpstreamRejected) as exc:
            upstream(rec, _get())
        assert exc.value.status == 401
        assert len(rec.requests) == 1

    def test_undecodable_body_not_retried(self, upstream):
        rec = Recorder([httpx.Response(200, text="<html>maintenance</html>")])
        with pytest.raises(UpstreamMalformed):
            upstream(rec, _get())
        assert len(rec.requests) == 1

    def test_unexpected_top_level_type(self, upstream):
        rec = Recorder([httpx.Response(200, json=[1, 2, 3])])
        with pytest.raises(UpstreamMalformed):
            upstream(rec, _get(expect=dict))

    def test_list_accepted_when_expected(self, upstream):
        rec = Recorder([httpx.Response(200, json=[{"id": 1}])])
        assert upstream(rec, _get(expect=(dict, list))) == [{"id": 1}]


# ── Credentials ───────────────────────────────────────────────────────────────

class TestCredentials:
    def test_access_token_sent_as_query_param(self):
        rec = Recorder([httpx.Response(200, json={})])

        async def go():
            cfg = UpstreamConfig(name="core", base_url="https://core.test", params={"access_token": "tok"})
            async with make_client(cfg, transport=httpx.MockTransport(rec)) as http:
                await UpstreamClient(cfg, http).get_json("/x", {"page": 2})

        asyncio.run(go())
        params = rec.requests[0].url.params
        assert params["access_token"] == "tok"
        assert params["page"] == "2"

    def test_masked_url_hides_token(self):
        url = httpx.URL("https://core.test/x?access_token=supersecret123&page=1")
        out = masked_url(url)
        assert "supersecret123" not in out
        assert "page=1" in out

    def test_mask_short_secret(self):
        assert mask_secret("abc") == "****"
        assert mask_secret("abcdefgh") == "****efgh"
        assert mask_secret(None) is None
