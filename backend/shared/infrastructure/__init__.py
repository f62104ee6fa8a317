"""
Infrastructure module: database sessions and request correlation.
"""

from shared.infrastructure.db import (
    engine,
    engine_options,
    SessionLocal,
    get_db,
    get_db_context,
    safe_commit,
)

__all__ = [
    "engine",
    "engine_options",
    "SessionLocal",
    "get_db",
    "get_db_context",
    "safe_commit",
]
