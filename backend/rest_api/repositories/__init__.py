"""
Repository Pattern implementation.
Centralizes data access for the command lifecycle.

Usage:
    from rest_api.repositories import SqlCommandRepository

    repo = SqlCommandRepository(db)
    with repo.transaction():
        command = repo.get_command(command_id)
"""

from .base import CommandRepository, RepositoryFilters
from .sql import SqlCommandRepository, StoreLayout, clear_layout_cache, load_layout

__all__ = [
    # Base
    "CommandRepository",
    "RepositoryFilters",
    # SQL
    "SqlCommandRepository",
    "StoreLayout",
    "load_layout",
    "clear_layout_cache",
]
