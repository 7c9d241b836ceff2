"""
Shared pytest fixtures for the sync engine test suite.

Provides:
  - ``db``: a Session on a fresh in-memory SQLite database with every sync
    table created. SQLite is enough because the upserter picks the dialect
    insert from the session's bind.
  - ``settings``: a Settings instance with a known cron secret and no backoff.
  - ``upstream``: factory running a coroutine against an UpstreamClient whose
    transport is an ``httpx.MockTransport``.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Generator

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401  registers tables
from app.core.config import Settings
from app.core.db import Base
from app.jobs.sync.http import UpstreamClient, UpstreamConfig, make_client

CRON_SECRET = "test-cron-secret"


# ── Database ──────────────────────────────────────────────────────────────────

@pytest.fixture
def engine():
    # StaticPool + check_same_thread=False: writes run in a worker thread
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def db(engine) -> Generator[Session, None, None]:
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    yield session
    session.close()


# ── Settings ──────────────────────────────────────────────────────────────────

@pytest.fixture
def settings() -> Settings:
    return Settings(
        cron_secret=CRON_SECRET,
        database_url="sqlite://",
        core_api_base_url="https://core.test",
        core_api_access_token="core-token-123456",
        openaq_base_url="https://openaq.test/v3",
        openaq_api_key="openaq-key-123456",
        connect_timeout=1.0,
        read_timeout=1.0,
        retries=3,
        backoff_base=0.0,
        batch_size=500,
        routes_lookback_days=90,
        routes_per_page=2,
        max_pages=50,
        log_level="DEBUG",
    )


# ── Upstream ──────────────────────────────────────────────────────────────────

def mock_config(name: str = "core", retries: int = 3) -> UpstreamConfig:
    base = "https://openaq.test/v3" if name == "openaq" else "https://core.test"
    return UpstreamConfig(name=name, base_url=base, retries=retries, backoff_base=0.0)


@pytest.fixture
def upstream() -> Callable:
    """
    upstream(handler, fn, name="core", retries=3) runs ``await fn(client)``
    with a client whose requests all go to ``handler(request)``.
    """

    def _run(handler, fn, *, name: str = "core", retries: int = 3):
        async def go():
            cfg = mock_config(name, retries)
            async with make_client(cfg, transport=httpx.MockTransport(handler)) as http:
                return await fn(UpstreamClient(cfg, http))

        return asyncio.run(go())

    return _run


@pytest.fixture
def mock_client_dep():
    """Build a FastAPI dependency override yielding a mocked UpstreamClient."""

    def _make(handler, *, name: str = "core"):
        async def override():
            cfg = mock_config(name)
            async with make_client(cfg, transport=httpx.MockTransport(handler)) as http:
                yield UpstreamClient(cfg, http)

        return override

    return _make
