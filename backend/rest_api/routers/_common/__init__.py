"""
Common utilities shared across routers.
"""

from .deps import (
    current_staff_id,
    get_repository,
    get_lifecycle,
    get_table_service,
)
from .pagination import Pagination, get_pagination

__all__ = [
    # Dependencies
    "current_staff_id",
    "get_repository",
    "get_lifecycle",
    "get_table_service",
    # Pagination
    "Pagination",
    "get_pagination",
]
