from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from app.core.config import get_settings

engine = create_engine(get_settings().database_url, pool_pre_ping=True)

SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

Base = declarative_base()


def init_db() -> None:
    """Create any missing sync tables. Existing tables are left untouched."""
    import app.models  # noqa: F401  registers every table on Base.metadata

    Base.metadata.create_all(bind=engine)
