"""
Table Model: physical tables of a restaurant.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import TableStatus

from .base import Base, TimestampMixin, new_id

if TYPE_CHECKING:
    from .tenant import Restaurant
    from .order import Command


class Table(TimestampMixin, Base):
    """
    Physical table in a restaurant.
    Status follows the commands opened on it: available -> occupied -> available,
    or available <-> reserved.
    """

    __tablename__ = "tables"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    restaurant_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("restaurants.id"), nullable=False, index=True
    )
    number: Mapped[int] = mapped_column(Integer, nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, default=4)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TableStatus.AVAILABLE
    )

    __table_args__ = (
        UniqueConstraint("restaurant_id", "number", name="uq_tables_restaurant_number"),
        Index("ix_tables_restaurant_status", "restaurant_id", "status"),
    )

    # Relationships
    restaurant: Mapped["Restaurant"] = relationship(back_populates="tables")
    commands: Mapped[list["Command"]] = relationship(back_populates="table")
