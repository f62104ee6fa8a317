"""
Test helpers: id generator and an in-memory CommandRepository.

The in-memory repository keeps the same contract as the SQL one
(conditional updates, NotFoundError, all-or-nothing transactions) so the
lifecycle can be exercised without a database, e.g. under hypothesis.
"""

import copy
import itertools
from contextlib import contextmanager
from dataclasses import replace

from shared.config.constants import CommandStatus
from shared.utils.exceptions import (
    ConcurrentModificationError,
    ConflictError,
    NotFoundError,
)
from rest_api.repositories.base import CommandRepository, RepositoryFilters
from rest_api.services.domain.records import (
    CommandItemRecord,
    CommandRecord,
    ProductRecord,
    RestaurantRecord,
    StaffRecord,
    TableRecord,
)


_id_counter = itertools.count(1000)


def next_id() -> str:
    """Generate a unique string ID for test entities."""
    return f"id-{next(_id_counter)}"


class InMemoryCommandRepository(CommandRepository):
    """Dictionary-backed repository for unit and property tests."""

    def __init__(self):
        self.restaurants: dict[str, RestaurantRecord] = {}
        self.tables: dict[str, TableRecord] = {}
        self.staff: dict[str, StaffRecord] = {}
        self.products: dict[str, ProductRecord] = {}
        self.commands: dict[str, CommandRecord] = {}
        self.items: dict[str, CommandItemRecord] = {}
        self.writes = 0
        # Command ids read with for_update, in order
        self.locked: list[str] = []
        self._depth = 0

    # Seeding helpers -------------------------------------------------------

    def add_restaurant(self, name="Test Restaurant") -> RestaurantRecord:
        record = RestaurantRecord(id=next_id(), name=name)
        self.restaurants[record.id] = record
        return record

    def add_table(self, restaurant_id, number, status="available") -> TableRecord:
        record = TableRecord(id=next_id(), restaurant_id=restaurant_id, status=status, number=number)
        self.tables[record.id] = record
        return record

    def add_staff(self, role, restaurant_id=None, status="active") -> StaffRecord:
        record = StaffRecord(id=next_id(), role=role, restaurant_id=restaurant_id, status=status)
        self.staff[record.id] = record
        return record

    def add_product(self, restaurant_id, name, price, category=None) -> ProductRecord:
        record = ProductRecord(
            id=next_id(), restaurant_id=restaurant_id, name=name, price=price, category=category
        )
        self.products[record.id] = record
        return record

    # Tables ----------------------------------------------------------------

    def get_table(self, table_id):
        if table_id not in self.tables:
            raise NotFoundError("Table", table_id)
        return self.tables[table_id]

    def update_table_status(self, table_id, status, expected_current_status):
        table = self.tables.get(table_id)
        if table is None or table.status != expected_current_status:
            return False
        self.tables[table_id] = replace(table, status=status)
        self.writes += 1
        return True

    def list_tables(self, restaurant_id, filters=None):
        filters = filters or RepositoryFilters()
        tables = [
            t for t in self.tables.values()
            if t.restaurant_id == restaurant_id and (not filters.status or t.status == filters.status)
        ]
        tables.sort(key=lambda t: t.number or 0)
        return tables[filters.offset:filters.offset + filters.limit]

    # Commands --------------------------------------------------------------

    def get_command(self, command_id, *, for_update=False):
        if for_update:
            self.locked.append(command_id)
        if command_id not in self.commands:
            raise NotFoundError("Command", command_id)
        return self.commands[command_id]

    def get_open_command_for_table(self, table_id):
        return next(
            (c for c in self.commands.values() if c.table_id == table_id and c.status == CommandStatus.OPEN),
            None,
        )

    def save_command(self, command, *, expected_status=None):
        if command.id is None:
            if command.status == CommandStatus.OPEN and self.get_open_command_for_table(command.table_id):
                raise ConflictError(f"Table {command.table_id} already has an open command")
            command = replace(command, id=next_id())
        else:
            stored = self.get_command(command.id)
            if expected_status is not None and stored.status != expected_status:
                raise ConcurrentModificationError("Command", command.id, expected_status)
        self.commands[command.id] = command
        self.writes += 1
        return command

    def list_commands(self, restaurant_id, filters=None):
        filters = filters or RepositoryFilters()
        commands = [
            c for c in self.commands.values()
            if self.tables[c.table_id].restaurant_id == restaurant_id
            and (not filters.status or c.status == filters.status)
            and (not filters.staff_id or c.staff_id == filters.staff_id)
        ]
        return commands[filters.offset:filters.offset + filters.limit]

    # Items -----------------------------------------------------------------

    def list_items(self, command_id):
        return [i for i in self.items.values() if i.command_id == command_id]

    def insert_item(self, item):
        item = replace(item, id=next_id())
        self.items[item.id] = item
        self.writes += 1
        return item

    def delete_item(self, command_id, item_id):
        item = self.items.get(item_id)
        if item is None or item.command_id != command_id:
            raise NotFoundError("Command item", item_id)
        del self.items[item_id]
        self.writes += 1

    # Catalog and staff -----------------------------------------------------

    def get_product(self, product_id):
        if product_id not in self.products:
            raise NotFoundError("Product", product_id)
        return self.products[product_id]

    def list_products(self, restaurant_id, filters=None):
        filters = filters or RepositoryFilters()
        search = (filters.search or "").lower()
        return [
            p for p in self.products.values()
            if p.restaurant_id == restaurant_id and search in p.name.lower()
        ]

    def get_staff(self, staff_id):
        if staff_id not in self.staff:
            raise NotFoundError("Staff", staff_id)
        return self.staff[staff_id]

    def list_restaurants(self):
        return list(self.restaurants.values())

    # Unit of work ----------------------------------------------------------

    @contextmanager
    def transaction(self):
        if self._depth:
            yield
            return

        snapshot = copy.deepcopy((self.tables, self.commands, self.items))
        self._depth += 1
        try:
            yield
        except Exception:
            self.tables, self.commands, self.items = snapshot
            raise
        finally:
            self._depth -= 1
