"""Database schema bootstrap helpers.

This project primarily relies on Alembic migrations for production databases.
For SQLite-based development and tests, we provide a best-effort helper to
ensure tables exist at startup.
"""

from __future__ import annotations

from sqlalchemy import Engine

from src.infrastructure.database.base import Base
from src.infrastructure.database.engine import sync_engine


def ensure_sqlite_schema(engine: Engine | None = None) -> bool:
    """Best-effort schema creation for SQLite.

    Notes:
    - Only runs for SQLite URLs; returns whether tables were created.
    - For other databases, migrations (Alembic) should be used.
    """

    # Ensure ORM models are imported so they are registered on Base.metadata
    from src.infrastructure.database import models as _models  # noqa: F401

    engine = engine or sync_engine
    if not str(engine.url).startswith("sqlite"):
        return False
    Base.metadata.create_all(bind=engine)
    return True
