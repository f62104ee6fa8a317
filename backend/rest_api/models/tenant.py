"""
Tenant Model: Restaurant.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, new_id

if TYPE_CHECKING:
    from .table import Table
    from .user import User
    from .catalog import Product


class Restaurant(TimestampMixin, Base):
    """
    A restaurant: the tenant boundary.
    Tables, products and (non super admin) staff belong to exactly one restaurant.
    """

    __tablename__ = "restaurants"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    address: Mapped[Optional[str]] = mapped_column(Text)
    phone: Mapped[Optional[str]] = mapped_column(String(40))

    # Relationships
    tables: Mapped[list["Table"]] = relationship(back_populates="restaurant")
    staff: Mapped[list["User"]] = relationship(back_populates="restaurant")
    products: Mapped[list["Product"]] = relationship(back_populates="restaurant")
