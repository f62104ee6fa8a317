"""
Schema Resolver - alias tables for inconsistently named stored records.

Rows written by different generations of the apps spell the same field
several ways (``restaurant_id`` / ``restaurantId``, ``status`` /
``commandStatus`` ...). Each entity declares its fields once as alias
groups; the resolver maps a raw row onto canonical snake_case names before
any business logic sees it, and maps canonical values back onto whatever
physical columns a table actually has.

Usage:
    resolver = SchemaResolver(COMMAND_SCHEMA)
    command = resolver.normalize({"id": "c1", "tableId": "t4", "commandStatus": "open"})
    # {"id": "c1", "table_id": "t4", "status": "open"}

    resolver.to_physical({"status": "closed"}, available_columns={"id", "commandStatus"})
    # {"commandStatus": "closed"}
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from shared.config.logging import schema_logger as logger
from shared.utils.exceptions import MissingFieldError


@dataclass(frozen=True)
class AliasGroup:
    """One canonical field and the spellings it may be stored under, in priority order."""

    canonical: str
    aliases: tuple[str, ...]
    required: bool = False

    def __post_init__(self) -> None:
        if not self.aliases:
            raise ValueError(f"Alias group '{self.canonical}' needs at least one alias")


@dataclass(frozen=True)
class EntitySchema:
    """Alias groups describing one stored entity."""

    name: str
    groups: tuple[AliasGroup, ...]

    def group(self, canonical: str) -> AliasGroup:
        for group in self.groups:
            if group.canonical == canonical:
                return group
        raise KeyError(f"{self.name} has no field '{canonical}'")

    @property
    def canonical_fields(self) -> tuple[str, ...]:
        return tuple(g.canonical for g in self.groups)

    @property
    def required_fields(self) -> tuple[str, ...]:
        return tuple(g.canonical for g in self.groups if g.required)


def _group(canonical: str, *aliases: str, required: bool = False) -> AliasGroup:
    return AliasGroup(canonical=canonical, aliases=aliases or (canonical,), required=required)


class SchemaResolver:
    """
    Pure mapping between stored spellings and canonical field names.

    Never touches storage; the SQL repository hands it reflected column
    names and raw rows.
    """

    def __init__(self, schema: EntitySchema):
        self.schema = schema

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def normalize(self, record: Mapping[str, Any]) -> dict[str, Any]:
        """
        Return a record holding canonical fields only.

        A canonical field is present iff one of its aliases is present in
        the input. When several aliases carry a value, the first declared
        one with a non-null value wins. Unknown keys are dropped.

        Raises:
            MissingFieldError: a required field is absent or null under every alias.
        """
        normalized: dict[str, Any] = {}

        for group in self.schema.groups:
            found = False
            value = None
            for alias in group.aliases:
                if alias not in record:
                    continue
                found = True
                if record[alias] is not None:
                    value = record[alias]
                    break

            if group.required and value is None:
                raise MissingFieldError(self.schema.name, group.canonical, group.aliases)

            if found:
                normalized[group.canonical] = value

        return normalized

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def resolve_column(self, canonical: str, available_columns: Iterable[str]) -> str | None:
        """
        Physical column that stores a canonical field, or None.

        Exact spellings are tried in alias order first, then a
        case-insensitive match (unquoted identifiers fold case on some
        backends).
        """
        group = self.schema.group(canonical)
        columns = list(available_columns)

        for alias in group.aliases:
            if alias in columns:
                return alias

        folded = {column.lower(): column for column in columns}
        for alias in group.aliases:
            column = folded.get(alias.lower())
            if column is not None:
                return column

        return None

    def to_physical(self, values: Mapping[str, Any], available_columns: Iterable[str]) -> dict[str, Any]:
        """
        Map canonical values onto physical column names.

        Optional fields with no column are skipped (logged). A required
        field with no column raises MissingFieldError.
        """
        columns = list(available_columns)
        physical: dict[str, Any] = {}

        for canonical, value in values.items():
            group = self.schema.group(canonical)
            column = self.resolve_column(canonical, columns)
            if column is None:
                if group.required:
                    raise MissingFieldError(
                        self.schema.name,
                        canonical,
                        group.aliases,
                        reason="no physical column",
                    )
                log_fn = logger.debug if value is None else logger.warning
                log_fn(
                    "Skipping field without column",
                    entity=self.schema.name,
                    field=canonical,
                    aliases=list(group.aliases),
                )
                continue
            physical[column] = value

        return physical


# =============================================================================
# Entity schemas
# =============================================================================

RESTAURANT_SCHEMA = EntitySchema(
    name="Restaurant",
    groups=(
        _group("id", required=True),
        _group("name", "name", "restaurant_name", "restaurantName"),
        _group("address"),
        _group("phone", "phone", "telephone"),
    ),
)

TABLE_SCHEMA = EntitySchema(
    name="Table",
    groups=(
        _group("id", required=True),
        _group("restaurant_id", "restaurant_id", "restaurantId", "restaurant", required=True),
        _group("number", "number", "table_number", "tableNumber"),
        _group("capacity", "capacity", "seats"),
        _group("status", "status", "tableStatus", "table_status", required=True),
    ),
)

STAFF_SCHEMA = EntitySchema(
    name="Staff",
    groups=(
        _group("id", required=True),
        _group("role", "role", "user_role", "userRole", required=True),
        _group("restaurant_id", "restaurant_id", "restaurantId", "restaurant"),
        _group("status", "status", "user_status", "userStatus"),
        _group("name", "name", "full_name", "fullName"),
        _group("email"),
    ),
)

PRODUCT_SCHEMA = EntitySchema(
    name="Product",
    groups=(
        _group("id", required=True),
        _group("restaurant_id", "restaurant_id", "restaurantId", "restaurant", required=True),
        _group("name", required=True),
        _group("description"),
        _group("price", "price", "unit_price", "unitPrice", required=True),
        _group("category", "category", "category_name", "categoryName"),
    ),
)

COMMAND_SCHEMA = EntitySchema(
    name="Command",
    groups=(
        _group("id", required=True),
        _group("table_id", "table_id", "tableId", "table", required=True),
        _group("staff_id", "staff_id", "user_id", "userId", "waiter_id", "waiterId"),
        _group("status", "status", "commandStatus", "command_status", required=True),
        _group("total", "total", "total_amount", "totalAmount"),
        _group("created_at", "created_at", "createdAt"),
        _group("closed_at", "closed_at", "closedAt"),
        _group("paid_at", "paid_at", "paidAt"),
        _group("payment_method", "payment_method", "paymentMethod"),
        _group("paid_amount", "paid_amount", "paidAmount"),
        _group("restaurant_id", "restaurant_id", "restaurantId", "restaurant"),
        _group("client_name", "client_name", "clientName", "customer_name"),
        _group("updated_at", "updated_at", "updatedAt"),
    ),
)

ITEM_SCHEMA = EntitySchema(
    name="CommandItem",
    groups=(
        _group("id", required=True),
        _group("command_id", "command_id", "commandId", "command", required=True),
        _group("product_id", "product_id", "productId", "product", required=True),
        _group("quantity", "quantity", "qty", required=True),
        _group("unit_price", "unit_price", "unitPrice", "price", required=True),
        _group("notes", "notes", "observation", "observations"),
        _group("created_at", "created_at", "createdAt"),
    ),
)

restaurant_resolver = SchemaResolver(RESTAURANT_SCHEMA)
table_resolver = SchemaResolver(TABLE_SCHEMA)
staff_resolver = SchemaResolver(STAFF_SCHEMA)
product_resolver = SchemaResolver(PRODUCT_SCHEMA)
command_resolver = SchemaResolver(COMMAND_SCHEMA)
item_resolver = SchemaResolver(ITEM_SCHEMA)
