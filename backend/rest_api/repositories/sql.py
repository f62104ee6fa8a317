"""
SQL implementation of the command repository.

Works on tables reflected from the live database rather than on the ORM
models, so rows written by older app generations (``restaurantId``,
``commandStatus``, a ``command_products`` item table ...) are read and
written through the same alias tables the domain uses.

Usage:
    with get_db_context() as db:
        repo = SqlCommandRepository(db)
        with repo.transaction():
            table = repo.get_table(table_id)
"""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import uuid4

from sqlalchemy import (
    Column,
    Connection,
    MetaData,
    Table as SqlTable,
    delete,
    func,
    inspect,
    insert,
    or_,
    select,
    update,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from shared.config.constants import CommandStatus
from shared.config.logging import get_logger
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import (
    ConcurrentModificationError,
    ConflictError,
    DatabaseError,
    MissingFieldError,
    NotFoundError,
)
from shared.utils.validators import escape_like_pattern

from rest_api.repositories.base import CommandRepository, RepositoryFilters
from rest_api.services.domain.records import (
    CommandItemRecord,
    CommandRecord,
    ProductRecord,
    RestaurantRecord,
    StaffRecord,
    TableRecord,
)
from rest_api.services.domain.schema_resolver import (
    SchemaResolver,
    command_resolver,
    item_resolver,
    product_resolver,
    restaurant_resolver,
    staff_resolver,
    table_resolver,
)

logger = get_logger(__name__)


# =============================================================================
# Storage layout (reflected tables)
# =============================================================================

# Physical table names tried per entity, in order
TABLE_CANDIDATES: dict[str, tuple[str, ...]] = {
    "restaurants": ("restaurants",),
    "tables": ("tables", "restaurant_tables"),
    "staff": ("users", "staff"),
    "products": ("products",),
    "commands": ("commands",),
    "items": ("command_items", "command_products"),
}

OPTIONAL_TABLES = frozenset({"restaurants"})


@dataclass(frozen=True)
class StoreLayout:
    """Reflected tables backing each entity."""

    restaurants: SqlTable | None
    tables: SqlTable
    staff: SqlTable
    products: SqlTable
    commands: SqlTable
    items: SqlTable


_layouts: dict[Engine, StoreLayout] = {}


def load_layout(connection: Connection) -> StoreLayout:
    """Reflect (once per engine) the physical tables for every entity."""
    engine = connection.engine
    cached = _layouts.get(engine)
    if cached is not None:
        return cached

    existing = set(inspect(connection).get_table_names())
    metadata = MetaData()
    resolved: dict[str, SqlTable | None] = {}

    for role, candidates in TABLE_CANDIDATES.items():
        name = next((c for c in candidates if c in existing), None)
        if name is None:
            if role in OPTIONAL_TABLES:
                resolved[role] = None
                continue
            raise DatabaseError(
                "schema reflection",
                missing_table=role,
                candidates=list(candidates),
            )
        resolved[role] = SqlTable(name, metadata, autoload_with=connection)

    layout = StoreLayout(**resolved)
    _layouts[engine] = layout
    logger.info(
        "Storage layout resolved",
        tables={role: table.name for role, table in resolved.items() if table is not None},
    )
    return layout


def clear_layout_cache() -> None:
    """Forget reflected layouts (after migrations, between test databases)."""
    _layouts.clear()


def _bind_value(column: Column, value: Any) -> Any:
    """
    Adapt a canonical value to the column's declared type.

    Ids travel as strings but legacy tables may key on integers; money is
    Decimal but legacy columns may be REAL or TEXT.
    """
    if value is None:
        return None

    try:
        python_type = column.type.python_type
    except NotImplementedError:
        python_type = None

    if isinstance(value, Decimal):
        if python_type is Decimal:
            return value
        if python_type is float:
            return float(value)
        return str(value)

    if isinstance(value, datetime) and python_type is not datetime:
        return value.isoformat()

    if isinstance(value, str) and python_type is int and value.lstrip("-").isdigit():
        return int(value)

    return value


# =============================================================================
# Repository
# =============================================================================


class SqlCommandRepository(CommandRepository):
    """CommandRepository over a SQLAlchemy session and reflected tables."""

    def __init__(self, db: Session):
        self._db = db
        self._depth = 0

    @property
    def layout(self) -> StoreLayout:
        return load_layout(self._db.connection())

    # -------------------------------------------------------------------------
    # Column helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _column(table: SqlTable, resolver: SchemaResolver, canonical: str) -> Column | None:
        name = resolver.resolve_column(canonical, table.columns.keys())
        return table.c[name] if name is not None else None

    @classmethod
    def _require_column(cls, table: SqlTable, resolver: SchemaResolver, canonical: str) -> Column:
        column = cls._column(table, resolver, canonical)
        if column is None:
            group = resolver.schema.group(canonical)
            raise MissingFieldError(
                resolver.schema.name,
                canonical,
                group.aliases,
                table=table.name,
                reason="no physical column",
            )
        return column

    @staticmethod
    def _status_matches(column: Column, status: str):
        # Legacy rows store "Open" / "OPEN"
        return func.lower(column) == status.lower()

    def _physical_values(self, table: SqlTable, resolver: SchemaResolver, values: dict[str, Any]) -> dict[str, Any]:
        physical = resolver.to_physical(values, table.columns.keys())
        return {name: _bind_value(table.c[name], value) for name, value in physical.items()}

    def _fetch_one(
        self,
        table: SqlTable,
        resolver: SchemaResolver,
        entity_id: str,
        entity: str,
        for_update: bool = False,
    ) -> dict[str, Any]:
        id_column = self._require_column(table, resolver, "id")
        query = select(table).where(id_column == _bind_value(id_column, entity_id))
        if for_update:
            # SQLite has no row locks; the dialect drops the clause
            query = query.with_for_update()
        row = self._db.execute(query).mappings().first()
        if row is None:
            raise NotFoundError(entity, entity_id)
        return resolver.normalize(row)

    def _fetch_all(self, query, resolver: SchemaResolver) -> list[dict[str, Any]]:
        return [resolver.normalize(row) for row in self._db.execute(query).mappings().all()]

    # -------------------------------------------------------------------------
    # Tables
    # -------------------------------------------------------------------------

    def get_table(self, table_id: str) -> TableRecord:
        return TableRecord.from_record(
            self._fetch_one(self.layout.tables, table_resolver, table_id, "Table")
        )

    def update_table_status(self, table_id: str, status: str, expected_current_status: str) -> bool:
        table = self.layout.tables
        id_column = self._require_column(table, table_resolver, "id")
        status_column = self._require_column(table, table_resolver, "status")

        result = self._db.execute(
            update(table)
            .where(
                id_column == _bind_value(id_column, table_id),
                self._status_matches(status_column, expected_current_status),
            )
            .values({status_column.name: status})
        )
        applied = result.rowcount == 1
        if not applied:
            logger.info(
                "Conditional table update matched no row",
                table_id=table_id,
                status=status,
                expected=expected_current_status,
            )
        return applied

    def list_tables(self, restaurant_id: str, filters: RepositoryFilters | None = None) -> list[TableRecord]:
        filters = filters or RepositoryFilters()
        table = self.layout.tables
        restaurant_column = self._require_column(table, table_resolver, "restaurant_id")

        query = select(table).where(restaurant_column == _bind_value(restaurant_column, restaurant_id))
        if filters.status:
            status_column = self._require_column(table, table_resolver, "status")
            query = query.where(self._status_matches(status_column, filters.status))

        number_column = self._column(table, table_resolver, "number")
        order_column = number_column if number_column is not None else self._require_column(table, table_resolver, "id")
        query = query.order_by(order_column).offset(filters.offset).limit(filters.limit)

        return [TableRecord.from_record(r) for r in self._fetch_all(query, table_resolver)]

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def get_command(self, command_id: str, *, for_update: bool = False) -> CommandRecord:
        return CommandRecord.from_record(
            self._fetch_one(self.layout.commands, command_resolver, command_id, "Command", for_update)
        )

    def get_open_command_for_table(self, table_id: str) -> CommandRecord | None:
        commands = self.layout.commands
        table_column = self._require_column(commands, command_resolver, "table_id")
        status_column = self._require_column(commands, command_resolver, "status")

        row = self._db.execute(
            select(commands)
            .where(
                table_column == _bind_value(table_column, table_id),
                self._status_matches(status_column, CommandStatus.OPEN),
            )
            .limit(1)
        ).mappings().first()
        if row is None:
            return None
        return CommandRecord.from_record(command_resolver.normalize(row))

    def save_command(self, command: CommandRecord, *, expected_status: str | None = None) -> CommandRecord:
        commands = self.layout.commands
        values = command.to_values()

        if command.id is None:
            # Unset fields fall back to column defaults
            values = {k: v for k, v in values.items() if v is not None}
            values["id"] = str(uuid4())
            try:
                self._db.execute(insert(commands).values(self._physical_values(commands, command_resolver, values)))
            except IntegrityError as exc:
                # Partial unique index on open commands per table
                raise ConflictError(
                    f"Table {command.table_id} already has an open command",
                    table_id=command.table_id,
                    error=str(exc.orig),
                ) from exc
            return self.get_command(values["id"])

        values.pop("id")
        id_column = self._require_column(commands, command_resolver, "id")
        query = update(commands).where(id_column == _bind_value(id_column, command.id))
        if expected_status is not None:
            status_column = self._require_column(commands, command_resolver, "status")
            query = query.where(self._status_matches(status_column, expected_status))

        result = self._db.execute(query.values(self._physical_values(commands, command_resolver, values)))
        if result.rowcount != 1:
            if expected_status is not None:
                raise ConcurrentModificationError("Command", command.id, expected_status)
            raise NotFoundError("Command", command.id)

        return self.get_command(command.id)

    def list_commands(self, restaurant_id: str, filters: RepositoryFilters | None = None) -> list[CommandRecord]:
        filters = filters or RepositoryFilters()
        commands = self.layout.commands
        tables = self.layout.tables

        table_column = self._require_column(commands, command_resolver, "table_id")
        tables_id = self._require_column(tables, table_resolver, "id")
        tables_restaurant = self._require_column(tables, table_resolver, "restaurant_id")

        # Commands reach their restaurant through the table; a restaurant
        # column on the command, when present, is honored too.
        restaurant_tables = select(tables_id).where(
            tables_restaurant == _bind_value(tables_restaurant, restaurant_id)
        )
        membership = table_column.in_(restaurant_tables)
        restaurant_column = self._column(commands, command_resolver, "restaurant_id")
        if restaurant_column is not None:
            membership = or_(membership, restaurant_column == _bind_value(restaurant_column, restaurant_id))

        query = select(commands).where(membership)

        if filters.status:
            status_column = self._require_column(commands, command_resolver, "status")
            query = query.where(self._status_matches(status_column, filters.status))

        if filters.staff_id:
            staff_column = self._column(commands, command_resolver, "staff_id")
            if staff_column is None:
                logger.warning("Commands carry no staff column, staff filter matches nothing", table=commands.name)
                return []
            query = query.where(staff_column == _bind_value(staff_column, filters.staff_id))

        created_column = self._column(commands, command_resolver, "created_at")
        if created_column is not None:
            query = query.order_by(created_column.desc())
        query = query.offset(filters.offset).limit(filters.limit)

        return [CommandRecord.from_record(r) for r in self._fetch_all(query, command_resolver)]

    # -------------------------------------------------------------------------
    # Items
    # -------------------------------------------------------------------------

    def list_items(self, command_id: str) -> list[CommandItemRecord]:
        items = self.layout.items
        command_column = self._require_column(items, item_resolver, "command_id")

        query = select(items).where(command_column == _bind_value(command_column, command_id))
        created_column = self._column(items, item_resolver, "created_at")
        if created_column is not None:
            query = query.order_by(created_column)

        return [CommandItemRecord.from_record(r) for r in self._fetch_all(query, item_resolver)]

    def insert_item(self, item: CommandItemRecord) -> CommandItemRecord:
        items = self.layout.items
        values = {k: v for k, v in item.to_values().items() if v is not None}
        values["id"] = str(uuid4())

        self._db.execute(insert(items).values(self._physical_values(items, item_resolver, values)))
        return CommandItemRecord.from_record(
            self._fetch_one(items, item_resolver, values["id"], "Command item")
        )

    def delete_item(self, command_id: str, item_id: str) -> None:
        items = self.layout.items
        id_column = self._require_column(items, item_resolver, "id")
        command_column = self._require_column(items, item_resolver, "command_id")

        result = self._db.execute(
            delete(items).where(
                id_column == _bind_value(id_column, item_id),
                command_column == _bind_value(command_column, command_id),
            )
        )
        if result.rowcount != 1:
            raise NotFoundError("Command item", item_id, command_id=command_id)

    # -------------------------------------------------------------------------
    # Catalog and staff
    # -------------------------------------------------------------------------

    def get_product(self, product_id: str) -> ProductRecord:
        return ProductRecord.from_record(
            self._fetch_one(self.layout.products, product_resolver, product_id, "Product")
        )

    def list_products(self, restaurant_id: str, filters: RepositoryFilters | None = None) -> list[ProductRecord]:
        filters = filters or RepositoryFilters()
        products = self.layout.products
        restaurant_column = self._require_column(products, product_resolver, "restaurant_id")
        name_column = self._require_column(products, product_resolver, "name")
        description_column = self._column(products, product_resolver, "description")
        category_column = self._column(products, product_resolver, "category")

        query = select(products).where(restaurant_column == _bind_value(restaurant_column, restaurant_id))

        if filters.search:
            pattern = f"%{escape_like_pattern(filters.search)}%"
            matches = [name_column.ilike(pattern, escape="\\")]
            if description_column is not None:
                matches.append(description_column.ilike(pattern, escape="\\"))
            query = query.where(or_(*matches))

        if filters.category:
            if category_column is None:
                return []
            query = query.where(func.lower(category_column) == filters.category.lower())

        order = [name_column] if category_column is None else [category_column, name_column]
        query = query.order_by(*order).offset(filters.offset).limit(filters.limit)

        return [ProductRecord.from_record(r) for r in self._fetch_all(query, product_resolver)]

    def get_staff(self, staff_id: str) -> StaffRecord:
        return StaffRecord.from_record(
            self._fetch_one(self.layout.staff, staff_resolver, staff_id, "Staff")
        )

    def list_restaurants(self) -> list[RestaurantRecord]:
        restaurants = self.layout.restaurants
        if restaurants is None:
            # No restaurants table: derive tenants from the tables they own
            tables = self.layout.tables
            restaurant_column = self._require_column(tables, table_resolver, "restaurant_id")
            ids = self._db.execute(select(restaurant_column).distinct()).scalars().all()
            return [RestaurantRecord(id=str(rid)) for rid in ids if rid is not None]

        query = select(restaurants).order_by(self._require_column(restaurants, restaurant_resolver, "id"))
        return [RestaurantRecord.from_record(r) for r in self._fetch_all(query, restaurant_resolver)]

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    def describe_layout(self) -> dict[str, dict[str, Any]]:
        """Physical table and column backing each canonical field."""
        layout = self.layout
        pairs = [
            ("restaurants", layout.restaurants, restaurant_resolver),
            ("tables", layout.tables, table_resolver),
            ("staff", layout.staff, staff_resolver),
            ("products", layout.products, product_resolver),
            ("commands", layout.commands, command_resolver),
            ("items", layout.items, item_resolver),
        ]
        report: dict[str, dict[str, Any]] = {}
        for role, table, resolver in pairs:
            if table is None:
                report[role] = {"table": None, "columns": {}}
                continue
            columns = table.columns.keys()
            report[role] = {
                "table": table.name,
                "columns": {
                    canonical: resolver.resolve_column(canonical, columns)
                    for canonical in resolver.schema.canonical_fields
                },
                "required": list(resolver.schema.required_fields),
            }
        return report

    # -------------------------------------------------------------------------
    # Unit of work
    # -------------------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if self._depth:
            # Join the outer transaction
            yield
            return

        self._depth += 1
        try:
            yield
            safe_commit(self._db)
        except SQLAlchemyError as exc:
            self._db.rollback()
            raise DatabaseError("command transaction", error=str(exc)) from exc
        except Exception:
            self._db.rollback()
            raise
        finally:
            self._depth -= 1
