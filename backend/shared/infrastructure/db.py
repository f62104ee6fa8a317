"""
Engine and sessions for the command store.

The store may be the canonical schema created from rest_api.models or a
legacy one that the SQL repository reflects; either way this module only
hands out sessions.
"""

import os
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

from shared.config.settings import DATABASE_URL


def engine_options(database_url: str) -> dict[str, Any]:
    """
    Keyword arguments for create_engine().

    SQLite (tests, local tooling) takes no pool sizing; it only needs
    sessions to cross threads, since TestClient serves on a worker thread.
    """
    if make_url(database_url).get_backend_name() == "sqlite":
        return {"connect_args": {"check_same_thread": False}}

    # Two connections per core, capped at 20
    pool_size = min((os.cpu_count() or 4) * 2 + 1, 20)
    return {
        "pool_pre_ping": True,
        "pool_size": pool_size,
        "max_overflow": 15,
        "pool_timeout": 30,
        "pool_recycle": 1800,
        "connect_args": {"connect_timeout": 10},
    }


# Lazy: nothing connects until the first session is used
engine = create_engine(DATABASE_URL, **engine_options(DATABASE_URL))

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """
    Session for code outside a request (CLI, healing jobs).

        with get_db_context() as db:
            repo = SqlCommandRepository(db)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency: one session per request, closed afterwards."""
    with get_db_context() as db:
        yield db


def safe_commit(db: Session) -> None:
    """Commit, or roll back and re-raise."""
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
