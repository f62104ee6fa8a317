"""
Command repository interface.

The lifecycle and table services talk to storage only through this
interface. Every method returns records already normalized to canonical
field names, or raises NotFoundError.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager

from rest_api.services.domain.records import (
    CommandItemRecord,
    CommandRecord,
    ProductRecord,
    RepositoryFilters,
    RestaurantRecord,
    StaffRecord,
    TableRecord,
)


class CommandRepository(ABC):
    """Persistence of commands, items, tables, products and staff."""

    # -------------------------------------------------------------------------
    # Tables
    # -------------------------------------------------------------------------

    @abstractmethod
    def get_table(self, table_id: str) -> TableRecord:
        ...

    @abstractmethod
    def update_table_status(self, table_id: str, status: str, expected_current_status: str) -> bool:
        """Set status only if the row still holds expected_current_status. Returns whether it applied."""
        ...

    @abstractmethod
    def list_tables(self, restaurant_id: str, filters: RepositoryFilters | None = None) -> list[TableRecord]:
        ...

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    @abstractmethod
    def get_command(self, command_id: str, *, for_update: bool = False) -> CommandRecord:
        """
        Load a command. With for_update the row stays locked until the
        surrounding transaction ends, serializing item and total writes.
        """
        ...

    @abstractmethod
    def get_open_command_for_table(self, table_id: str) -> CommandRecord | None:
        ...

    @abstractmethod
    def save_command(self, command: CommandRecord, *, expected_status: str | None = None) -> CommandRecord:
        """
        Insert (id is None) or update a command.

        With expected_status the update only applies while the stored
        status still equals it; otherwise ConcurrentModificationError.
        """
        ...

    @abstractmethod
    def list_commands(self, restaurant_id: str, filters: RepositoryFilters | None = None) -> list[CommandRecord]:
        ...

    # -------------------------------------------------------------------------
    # Items
    # -------------------------------------------------------------------------

    @abstractmethod
    def list_items(self, command_id: str) -> list[CommandItemRecord]:
        ...

    @abstractmethod
    def insert_item(self, item: CommandItemRecord) -> CommandItemRecord:
        ...

    @abstractmethod
    def delete_item(self, command_id: str, item_id: str) -> None:
        """Delete an item of this command. NotFoundError if it belongs elsewhere or does not exist."""
        ...

    # -------------------------------------------------------------------------
    # Catalog and staff
    # -------------------------------------------------------------------------

    @abstractmethod
    def get_product(self, product_id: str) -> ProductRecord:
        ...

    @abstractmethod
    def list_products(self, restaurant_id: str, filters: RepositoryFilters | None = None) -> list[ProductRecord]:
        ...

    @abstractmethod
    def get_staff(self, staff_id: str) -> StaffRecord:
        ...

    @abstractmethod
    def list_restaurants(self) -> list[RestaurantRecord]:
        ...

    # -------------------------------------------------------------------------
    # Unit of work
    # -------------------------------------------------------------------------

    @abstractmethod
    def transaction(self) -> AbstractContextManager[None]:
        """
        Scope in which all writes commit together or not at all.

        Nested use joins the outer transaction.
        """
        ...
