"""
Table Service - floor plan reads and reservation toggling.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from shared.config.constants import CommandAction, Limits, TableStatus
from shared.config.logging import table_logger as logger
from shared.utils.exceptions import ForbiddenError, ValidationError
from shared.utils.validators import sanitize_search_term

from rest_api.services.domain.records import ProductRecord, RepositoryFilters, TableRecord
from rest_api.services.domain.table_registry import TableRegistry

if TYPE_CHECKING:
    from rest_api.repositories.base import CommandRepository
    from rest_api.services.permissions import Authorizer


class TableService:
    """Service for table status and the product picker of a restaurant."""

    def __init__(
        self,
        repository: CommandRepository,
        authorizer: Authorizer,
        registry: TableRegistry | None = None,
    ):
        self._repo = repository
        self._authorizer = authorizer
        self._registry = registry or TableRegistry()

    def list_tables(
        self,
        restaurant_id: str,
        staff_id: str,
        status: str | None = None,
    ) -> list[TableRecord]:
        """List tables of a restaurant ordered by number, optionally by status."""
        self._authorize(staff_id, CommandAction.VIEW, restaurant_id)
        if status is not None:
            status = status.strip().lower()
            if status not in TableStatus.ALL:
                raise ValidationError(
                    f"status must be one of: {', '.join(TableStatus.ALL)}",
                    field="status",
                    value=status,
                )
        return self._repo.list_tables(
            restaurant_id,
            RepositoryFilters(status=status, limit=Limits.MAX_PAGE_SIZE),
        )

    def list_products(
        self,
        restaurant_id: str,
        staff_id: str,
        search: str | None = None,
        category: str | None = None,
        limit: int = Limits.MAX_PAGE_SIZE,
        offset: int = 0,
    ) -> list[ProductRecord]:
        """Product picker: name/description search and category filter."""
        self._authorize(staff_id, CommandAction.VIEW, restaurant_id)
        return self._repo.list_products(
            restaurant_id,
            RepositoryFilters(
                search=sanitize_search_term(search) or None,
                category=category or None,
                limit=limit,
                offset=offset,
            ),
        )

    def reserve(self, table_id: str, staff_id: str) -> TableRecord:
        """available -> reserved."""
        with self._repo.transaction():
            table = self._repo.get_table(table_id)
            self._authorize(staff_id, CommandAction.RESERVE_TABLE, table.restaurant_id)
            table = self._registry.apply(self._repo, self._registry.reserve(table))

        logger.info("Table reserved", table_id=table.id, staff_id=staff_id)
        return table

    def unreserve(self, table_id: str, staff_id: str) -> TableRecord:
        """reserved -> available."""
        with self._repo.transaction():
            table = self._repo.get_table(table_id)
            self._authorize(staff_id, CommandAction.RESERVE_TABLE, table.restaurant_id)
            table = self._registry.apply(self._repo, self._registry.unreserve(table))

        logger.info("Table reservation cleared", table_id=table.id, staff_id=staff_id)
        return table

    def _authorize(self, staff_id: str | None, action: str, restaurant_id: str | None) -> None:
        if not self._authorizer.is_allowed(staff_id, action, restaurant_id):
            raise ForbiddenError(action, staff_id=staff_id, restaurant_id=restaurant_id)
