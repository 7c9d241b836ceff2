from typing import AsyncIterator, Iterator, Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.db import SessionLocal
from app.jobs.sync.auth import AuthGate
from app.jobs.sync.errors import Unauthorized
from app.jobs.sync.http import UpstreamClient, UpstreamConfig, make_client


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_auth_gate(settings: Settings = Depends(get_settings)) -> AuthGate:
    return AuthGate(settings.cron_secret)


def require_cron_secret(
    authorization: Optional[str] = Header(None),
    gate: AuthGate = Depends(get_auth_gate),
) -> None:
    if not gate.check(authorization):
        raise Unauthorized()


def core_config(settings: Settings) -> UpstreamConfig:
    return UpstreamConfig(
        name="core",
        base_url=settings.core_api_base_url,
        connect_timeout=settings.connect_timeout,
        read_timeout=settings.read_timeout,
        retries=settings.retries,
        backoff_base=settings.backoff_base,
        params={"access_token": settings.core_api_access_token},
    )


def openaq_config(settings: Settings) -> UpstreamConfig:
    return UpstreamConfig(
        name="openaq",
        base_url=settings.openaq_base_url,
        connect_timeout=settings.connect_timeout,
        read_timeout=settings.read_timeout,
        retries=settings.retries,
        backoff_base=settings.backoff_base,
        headers={"X-API-Key": settings.openaq_api_key},
    )


async def get_core_client(settings: Settings = Depends(get_settings)) -> AsyncIterator[UpstreamClient]:
    cfg = core_config(settings)
    async with make_client(cfg) as client:
        yield UpstreamClient(cfg, client)


async def get_openaq_client(settings: Settings = Depends(get_settings)) -> AsyncIterator[UpstreamClient]:
    cfg = openaq_config(settings)
    async with make_client(cfg) as client:
        yield UpstreamClient(cfg, client)
