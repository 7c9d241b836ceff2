import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    cron_secret: str
    database_url: str

    core_api_base_url: str
    core_api_access_token: str

    openaq_base_url: str
    openaq_api_key: str

    connect_timeout: float
    read_timeout: float
    retries: int
    backoff_base: float

    batch_size: int
    routes_lookback_days: int
    routes_per_page: int
    max_pages: int

    log_level: str


def load_settings() -> Settings:
    load_dotenv()

    return Settings(
        cron_secret=os.getenv("CRON_SECRET", ""),
        database_url=os.getenv("DATABASE_URL", "postgresql+psycopg2://postgres@localhost:5432/mobility"),
        core_api_base_url=os.getenv("CORE_API_BASE_URL", "http://localhost:3000"),
        core_api_access_token=os.getenv("CORE_API_ACCESS_TOKEN", ""),
        openaq_base_url=os.getenv("OPENAQ_BASE_URL", "https://api.openaq.org/v3"),
        openaq_api_key=os.getenv("OPENAQ_API_KEY", ""),
        connect_timeout=float(os.getenv("UPSTREAM_CONNECT_TIMEOUT_SECONDS", "10")),
        read_timeout=float(os.getenv("UPSTREAM_READ_TIMEOUT_SECONDS", "60")),
        retries=int(os.getenv("UPSTREAM_RETRIES", "3")),
        backoff_base=float(os.getenv("UPSTREAM_BACKOFF_BASE_SECONDS", "1.0")),
        batch_size=int(os.getenv("SYNC_BATCH_SIZE", "500")),
        routes_lookback_days=int(os.getenv("SYNC_ROUTES_LOOKBACK_DAYS", "90")),
        routes_per_page=int(os.getenv("SYNC_ROUTES_PER_PAGE", "200")),
        max_pages=int(os.getenv("SYNC_MAX_PAGES", "500")),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )


@lru_cache
def get_settings() -> Settings:
    return load_settings()
