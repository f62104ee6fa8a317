"""
Shared Pydantic schemas used across the application.

Money crosses the API as decimal strings. Request money fields accept
decimal strings or integers and reject JSON floats.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from shared.config.constants import Limits


# =============================================================================
# Common Types
# =============================================================================

Role = Literal["super_admin", "admin", "manager", "waiter"]
TableStatus = Literal["available", "occupied", "reserved"]
CommandStatus = Literal["open", "closed", "paid"]
PaymentMethod = Literal["cash", "credit", "debit", "pix"]


def _reject_float(value: Any) -> Any:
    if isinstance(value, float):
        raise ValueError("money must be sent as a decimal string or integer, not a float")
    return value


# =============================================================================
# Table Schemas
# =============================================================================


class TableOutput(BaseModel):
    """Output for a table."""

    id: str
    restaurant_id: str
    number: int | None = None
    capacity: int | None = None
    status: str


# =============================================================================
# Product Schemas
# =============================================================================


class ProductOutput(BaseModel):
    """Product as shown in the add-item picker."""

    id: str
    restaurant_id: str
    name: str
    description: str | None = None
    price: Decimal
    category: str | None = None


# =============================================================================
# Command Schemas
# =============================================================================


class OpenCommandRequest(BaseModel):
    """Request to open a command on a table."""

    table_id: str = Field(min_length=1)
    client_name: str | None = Field(default=None, max_length=Limits.MAX_NAME_LENGTH)


class AddItemRequest(BaseModel):
    """Request to add a product to an open command."""

    product_id: str = Field(min_length=1)
    # Range is enforced by the lifecycle (1..99)
    quantity: int
    notes: str | None = None


class MarkPaidRequest(BaseModel):
    """
    Request to record payment of a closed command.

    Payment is a status flag: no settlement happens here.
    """

    payment_method: str
    paid_amount: Decimal

    @field_validator("paid_amount", mode="before")
    @classmethod
    def reject_float_amount(cls, value: Any) -> Any:
        return _reject_float(value)


class CommandItemOutput(BaseModel):
    """Output for a single line item."""

    id: str
    product_id: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    notes: str | None = None
    created_at: datetime | None = None


class BillTotalsOutput(BaseModel):
    """Money derived from the item set."""

    subtotal: Decimal
    service_charge: Decimal
    service_charge_rate: Decimal
    total: Decimal


class CommandOutput(BaseModel):
    """Stored command fields."""

    id: str
    table_id: str
    staff_id: str | None = None
    restaurant_id: str | None = None
    status: str
    total: Decimal | None = None
    client_name: str | None = None
    created_at: datetime | None = None
    closed_at: datetime | None = None
    paid_at: datetime | None = None
    payment_method: str | None = None
    paid_amount: Decimal | None = None


class CommandViewOutput(BaseModel):
    """Command with table, items and totals."""

    command: CommandOutput
    table: TableOutput
    items: list[CommandItemOutput]
    totals: BillTotalsOutput
    # Authoritative total: stored cache when trusted, recomputed otherwise
    total: Decimal
    total_was_recomputed: bool


class CommandSummaryOutput(BaseModel):
    """One row of the manager command list."""

    id: str
    table_id: str
    table_number: int | None = None
    staff_id: str | None = None
    status: str
    client_name: str | None = None
    created_at: datetime | None = None
    closed_at: datetime | None = None
    paid_at: datetime | None = None
    total: Decimal
    total_was_recomputed: bool


# =============================================================================
# Health / Error Schemas
# =============================================================================


class HealthResponse(BaseModel):
    status: str
    service: str
    environment: str


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
    code: str | None = None
