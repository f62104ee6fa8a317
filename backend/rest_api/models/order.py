"""
Order Models: Command, CommandItem.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import CommandStatus

from .base import Base, TimestampMixin, new_id

if TYPE_CHECKING:
    from .table import Table


class Command(TimestampMixin, Base):
    """
    An open tab on a table: open -> closed -> paid.
    Never reopened, never deleted. ``total`` is a cache re-derivable from
    the items at any time.
    """

    __tablename__ = "commands"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    table_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tables.id"), nullable=False, index=True
    )
    # Opener
    staff_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=True, index=True
    )
    restaurant_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("restaurants.id"), nullable=True, index=True
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=CommandStatus.OPEN)
    total: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    client_name: Mapped[Optional[str]] = mapped_column(Text)
    closed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    payment_method: Mapped[Optional[str]] = mapped_column(String(20))
    paid_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))

    __table_args__ = (
        CheckConstraint(
            "status IN ('open', 'closed', 'paid')",
            name="chk_commands_status",
        ),
        # At most one open command per table
        Index(
            "uq_commands_open_per_table",
            "table_id",
            unique=True,
            postgresql_where=text("status = 'open'"),
            sqlite_where=text("status = 'open'"),
        ),
        Index("ix_commands_restaurant_status", "restaurant_id", "status"),
    )

    # Relationships
    table: Mapped["Table"] = relationship(back_populates="commands")
    items: Mapped[list["CommandItem"]] = relationship(
        back_populates="command", cascade="all, delete-orphan"
    )


class CommandItem(Base):
    """
    Line item of a command.
    unit_price is the product price captured when the item was added.
    """

    __tablename__ = "command_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    command_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("commands.id"), nullable=False, index=True
    )
    product_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("products.id"), nullable=False
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        CheckConstraint("quantity BETWEEN 1 AND 99", name="chk_command_items_quantity"),
        CheckConstraint("unit_price >= 0", name="chk_command_items_unit_price"),
    )

    # Relationships
    command: Mapped["Command"] = relationship(back_populates="items")
