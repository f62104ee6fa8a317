"""
Typed records handed between the repository and the domain services.

Records are built from rows already normalized by the schema resolver, so
field names here are always canonical. They are frozen: services derive a
changed copy with ``dataclasses.replace`` and hand it back to the
repository.
"""

from collections.abc import Mapping
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from shared.config.constants import Limits, StaffStatus
from shared.utils.validators import parse_money, parse_stored_money, validate_price


def _as_id(value: Any) -> str | None:
    return None if value is None else str(value)


def _as_status(value: Any) -> str | None:
    if value is None:
        return None
    return str(value).strip().lower()


def _as_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    return int(value)


def _as_datetime(value: Any) -> datetime | None:
    """Datetimes may come back as ISO strings from loosely typed columns."""
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Catalog / floor records
# =============================================================================


@dataclass(frozen=True)
class RestaurantRecord:
    id: str
    name: str | None = None
    address: str | None = None
    phone: str | None = None

    @classmethod
    def from_record(cls, data: Mapping[str, Any]) -> "RestaurantRecord":
        return cls(
            id=_as_id(data["id"]),
            name=_as_text(data.get("name")),
            address=_as_text(data.get("address")),
            phone=_as_text(data.get("phone")),
        )


@dataclass(frozen=True)
class TableRecord:
    id: str
    restaurant_id: str
    status: str
    number: int | None = None
    capacity: int | None = None

    @classmethod
    def from_record(cls, data: Mapping[str, Any]) -> "TableRecord":
        return cls(
            id=_as_id(data["id"]),
            restaurant_id=_as_id(data["restaurant_id"]),
            status=_as_status(data["status"]),
            number=_as_int(data.get("number")),
            capacity=_as_int(data.get("capacity")),
        )

    def to_values(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class StaffRecord:
    id: str
    role: str
    restaurant_id: str | None = None
    status: str = StaffStatus.ACTIVE
    name: str | None = None
    email: str | None = None

    @classmethod
    def from_record(cls, data: Mapping[str, Any]) -> "StaffRecord":
        # Rows without a status column predate account suspension: treat as active
        return cls(
            id=_as_id(data["id"]),
            role=_as_status(data["role"]),
            restaurant_id=_as_id(data.get("restaurant_id")),
            status=_as_status(data.get("status")) or StaffStatus.ACTIVE,
            name=_as_text(data.get("name")),
            email=_as_text(data.get("email")),
        )


@dataclass(frozen=True)
class ProductRecord:
    id: str
    restaurant_id: str
    name: str
    price: Decimal
    description: str | None = None
    category: str | None = None

    @classmethod
    def from_record(cls, data: Mapping[str, Any]) -> "ProductRecord":
        return cls(
            id=_as_id(data["id"]),
            restaurant_id=_as_id(data["restaurant_id"]),
            name=str(data["name"]),
            price=validate_price(data["price"]),
            description=_as_text(data.get("description")),
            category=_as_text(data.get("category")),
        )


# =============================================================================
# Command records
# =============================================================================


@dataclass(frozen=True)
class CommandItemRecord:
    command_id: str
    product_id: str
    quantity: int
    unit_price: Decimal
    id: str | None = None
    notes: str | None = None
    created_at: datetime | None = None

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    @classmethod
    def from_record(cls, data: Mapping[str, Any]) -> "CommandItemRecord":
        return cls(
            id=_as_id(data["id"]),
            command_id=_as_id(data["command_id"]),
            product_id=_as_id(data["product_id"]),
            quantity=int(data["quantity"]),
            unit_price=parse_money(data["unit_price"], field="unit_price", allow_float=True),
            notes=_as_text(data.get("notes")),
            created_at=_as_datetime(data.get("created_at")),
        )

    def to_values(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CommandRecord:
    """
    A command (open tab) as stored.

    ``total`` is the cached total; None when the stored value is missing
    or not a finite number. ``id`` is None until the repository inserts it.
    """

    table_id: str
    status: str
    id: str | None = None
    staff_id: str | None = None
    total: Decimal | None = None
    created_at: datetime | None = None
    closed_at: datetime | None = None
    paid_at: datetime | None = None
    payment_method: str | None = None
    paid_amount: Decimal | None = None
    restaurant_id: str | None = None
    client_name: str | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_record(cls, data: Mapping[str, Any]) -> "CommandRecord":
        return cls(
            id=_as_id(data["id"]),
            table_id=_as_id(data["table_id"]),
            status=_as_status(data["status"]),
            staff_id=_as_id(data.get("staff_id")),
            total=parse_stored_money(data.get("total")),
            created_at=_as_datetime(data.get("created_at")),
            closed_at=_as_datetime(data.get("closed_at")),
            paid_at=_as_datetime(data.get("paid_at")),
            payment_method=_as_status(data.get("payment_method")),
            paid_amount=parse_stored_money(data.get("paid_amount")),
            restaurant_id=_as_id(data.get("restaurant_id")),
            client_name=_as_text(data.get("client_name")),
            updated_at=_as_datetime(data.get("updated_at")),
        )

    def to_values(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class RepositoryFilters:
    """Filters for repository list queries."""

    # Pagination
    limit: int = Limits.DEFAULT_PAGE_SIZE
    offset: int = 0

    # Exact-match status filter
    status: str | None = None

    # Search (products: name or description)
    search: str | None = None
    category: str | None = None

    # Commands opened by this staff member only
    staff_id: str | None = None

    def __post_init__(self):
        """Validate and normalize filters."""
        self.limit = min(max(1, self.limit), Limits.MAX_PAGE_SIZE)
        self.offset = max(0, self.offset)
        if self.status:
            self.status = self.status.strip().lower()
        if self.search:
            self.search = self.search.strip()[:Limits.MAX_SEARCH_TERM_LENGTH]
        if self.category:
            self.category = self.category.strip()
