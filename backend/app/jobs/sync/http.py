import asyncio
import logging
import random
import time
from dataclasses import dataclass, field
from typing import Any, Optional, Union

import httpx

from app.jobs.sync.errors import UpstreamMalformed, UpstreamRejected, UpstreamUnreachable

logger = logging.getLogger(__name__)

RETRY_STATUSES = {429, 502, 503, 504, 520, 522, 524}

SECRET_PARAMS = ("access_token", "api_key")
SECRET_HEADERS = ("x-api-key", "authorization")


@dataclass(frozen=True)
class UpstreamConfig:
    name: str
    base_url: str

    connect_timeout: float = 10.0
    read_timeout: float = 60.0

    retries: int = 3
    backoff_base: float = 1.0

    params: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)


def mask_secret(value: Optional[str]) -> Optional[str]:
    if not value:
        return value
    if len(value) <= 6:
        return "****"
    return f"****{value[-4:]}"


def masked_url(url: httpx.URL) -> str:
    params = url.params
    for key in SECRET_PARAMS:
        if key in params:
            params = params.set(key, mask_secret(params[key]))
    return str(url.copy_with(params=params))


async def log_request(request: httpx.Request) -> None:
    logger.debug("HTTP %s %s", request.method, masked_url(request.url))
    for name in SECRET_HEADERS:
        if name in request.headers:
            logger.debug("HTTP %s: %s", name, mask_secret(request.headers[name]))


def make_client(cfg: UpstreamConfig, *, transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    timeout = httpx.Timeout(cfg.read_timeout, connect=cfg.connect_timeout)
    return httpx.AsyncClient(
        base_url=cfg.base_url,
        params=cfg.params,
        timeout=timeout,
        headers={"Accept": "application/json", **cfg.headers},
        event_hooks={"request": [log_request]},
        transport=transport,
    )


class UpstreamClient:
    """
    One upstream service. Each get_json() is a single logical call: transient
    failures are retried with exponential backoff, everything else is raised
    as-is so an outage never looks like an empty result.
    """

    def __init__(self, cfg: UpstreamConfig, client: httpx.AsyncClient):
        self.cfg = cfg
        self.client = client

    async def get_json(
        self,
        path: str,
        params: Optional[dict[str, Any]] = None,
        *,
        expect: Union[type, tuple[type, ...]] = dict,
    ) -> Any:
        last_err: Optional[UpstreamUnreachable] = None

        for attempt in range(1, self.cfg.retries + 1):
            try:
                return await self._get_once(path, params, expect=expect)
            except UpstreamUnreachable as e:
                last_err = e
                logger.warning(
                    "%s unreachable (attempt %d/%d) GET %s: %s",
                    self.cfg.name,
                    attempt,
                    self.cfg.retries,
                    path,
                    e.message,
                )
            if attempt < self.cfg.retries:
                await self._sleep_backoff(attempt=attempt, path=path)

        if last_err is None:
            raise UpstreamUnreachable(f"{self.cfg.name}: no attempts made for {path}", path=path)
        raise last_err

    async def _get_once(self, path: str, params: Optional[dict[str, Any]], *, expect) -> Any:
        t0 = time.perf_counter()
        try:
            r = await self.client.get(path, params=params)
        except (httpx.TimeoutException, httpx.TransportError) as e:
            raise UpstreamUnreachable(
                f"{self.cfg.name} {e.__class__.__name__} on {path}", path=path
            ) from e

        elapsed = time.perf_counter() - t0

        if r.status_code in RETRY_STATUSES:
            raise UpstreamUnreachable(f"{self.cfg.name} returned HTTP {r.status_code} for {path}", path=path)

        if r.is_error:
            snippet = (r.text or "")[:300]
            logger.error(
                "Non-retryable HTTP %d GET %s after %.2fs body_snippet=%r",
                r.status_code,
                path,
                elapsed,
                snippet,
            )
            raise UpstreamRejected(
                f"{self.cfg.name} returned HTTP {r.status_code} for {path}",
                path=path,
                status=r.status_code,
            )

        if elapsed > 10:
            logger.info("GET %s completed in %.2fs status=%d (slow)", path, elapsed, r.status_code)
        else:
            logger.debug("GET %s completed in %.2fs status=%d", path, elapsed, r.status_code)

        try:
            body = r.json()
        except ValueError as e:
            raise UpstreamMalformed(f"{self.cfg.name} sent undecodable JSON for {path}", path=path) from e

        if not isinstance(body, expect):
            raise UpstreamMalformed(
                f"{self.cfg.name} sent {type(body).__name__} for {path}, expected {_type_names(expect)}",
                path=path,
            )
        return body

    async def _sleep_backoff(self, *, attempt: int, path: str) -> None:
        sleep_s = self.cfg.backoff_base * (2 ** (attempt - 1))
        if sleep_s > 0:
            sleep_s += random.uniform(0, 0.5)
        logger.info("Sleeping %.2fs before retrying %s", sleep_s, path)
        await asyncio.sleep(sleep_s)


def _type_names(expect) -> str:
    if isinstance(expect, tuple):
        return " or ".join(t.__name__ for t in expect)
    return expect.__name__
