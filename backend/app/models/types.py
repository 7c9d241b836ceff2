from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB

# JSONB on Postgres, plain JSON elsewhere (SQLite in tests and local runs)
JsonColumn = JSON().with_variant(JSONB(), "postgresql")
