import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterator, Sequence

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.jobs.sync.errors import StorageWriteFailed, TransformSkipped
from app.jobs.sync.types import CanonicalRow

logger = logging.getLogger(__name__)

BATCH_SIZE = 500


@dataclass(frozen=True)
class UpsertStats:
    total: int
    written: int
    skipped: int
    batches: int


def chunked(rows: Sequence[CanonicalRow], size: int) -> Iterator[Sequence[CanonicalRow]]:
    if size < 1:
        raise ValueError(f"batch size must be positive, got {size}")
    for i in range(0, len(rows), size):
        yield rows[i : i + size]


def partition_rows(
    rows: Sequence[CanonicalRow], conflict_key: Sequence[str], *, domain: str
) -> tuple[list[CanonicalRow], list[TransformSkipped]]:
    valid: list[CanonicalRow] = []
    skipped: list[TransformSkipped] = []
    for row in rows:
        missing = [k for k in conflict_key if row.get(k) is None]
        if missing:
            skipped.append(TransformSkipped(domain, missing))
        else:
            valid.append(row)
    return valid, skipped


def collapse_duplicates(batch: Sequence[CanonicalRow], conflict_key: Sequence[str]) -> list[CanonicalRow]:
    # ON CONFLICT DO UPDATE cannot touch the same row twice in one statement
    by_key: dict[tuple, CanonicalRow] = {}
    for row in batch:
        by_key[tuple(row[k] for k in conflict_key)] = row
    return list(by_key.values())


def _insert_for(db: Session):
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return pg_insert
    if dialect == "sqlite":
        return sqlite_insert
    raise RuntimeError(f"upsert not supported for dialect {dialect!r}")


def upsert_rows(
    db: Session,
    model,
    rows: Sequence[CanonicalRow],
    conflict_key: Sequence[str],
    *,
    batch_size: int = BATCH_SIZE,
    domain: str | None = None,
) -> UpsertStats:
    """
    Upsert rows into model's table in independently committed batches.

    A failure rolls back only the failing batch; earlier batches stay written
    and the error carries how many rows made it. Re-running is safe since every
    write is keyed on conflict_key.
    """
    domain = domain or model.__tablename__
    valid, skipped = partition_rows(rows, conflict_key, domain=domain)
    for s in skipped:
        logger.debug("Skipped row: %s", s.message)
    if skipped:
        logger.warning("%s: dropped %d row(s) without a conflict key", domain, len(skipped))

    columns = {c.name for c in model.__table__.columns}
    stamp = datetime.now(timezone.utc)
    insert = _insert_for(db) if valid else None

    written = 0
    batches = 0
    for idx, batch in enumerate(chunked(valid, batch_size), start=1):
        values = [
            {
                **{k: v for k, v in row.items() if k in columns},
                **({"synced_at": row.get("synced_at") or stamp} if "synced_at" in columns else {}),
            }
            for row in collapse_duplicates(batch, conflict_key)
        ]

        stmt = insert(model).values(values)
        update_cols = {
            name: stmt.excluded[name]
            for name in values[0]
            if name not in conflict_key
        }
        if update_cols:
            stmt = stmt.on_conflict_do_update(index_elements=list(conflict_key), set_=update_cols)
        else:
            stmt = stmt.on_conflict_do_nothing(index_elements=list(conflict_key))

        try:
            db.execute(stmt)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                "%s: batch %d failed after %d committed row(s): %r", domain, idx, written, e
            )
            raise StorageWriteFailed(
                f"{domain}: write failed on batch {idx}: {e.__class__.__name__}",
                domain=domain,
                committed=written,
            ) from e

        written += len(values)
        batches += 1
        logger.debug("%s: batch %d committed rows=%d", domain, idx, len(values))

    logger.info(
        "%s upsert done: total=%d written=%d skipped=%d batches=%d",
        domain,
        len(rows),
        written,
        len(skipped),
        batches,
    )
    return UpsertStats(total=len(rows), written=written, skipped=len(skipped), batches=batches)
