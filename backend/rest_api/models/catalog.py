"""
Catalog Model: Product.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, new_id

if TYPE_CHECKING:
    from .tenant import Restaurant


class Product(TimestampMixin, Base):
    """
    Menu item of a restaurant.
    Command items copy the price at insertion, so price changes never
    alter existing commands.
    """

    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    restaurant_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("restaurants.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    # Free text ("Drinks", "Burgers")
    category: Mapped[Optional[str]] = mapped_column(String(100))

    __table_args__ = (
        CheckConstraint("price >= 0", name="chk_products_price_non_negative"),
        Index("ix_products_restaurant_category", "restaurant_id", "category"),
    )

    # Relationships
    restaurant: Mapped["Restaurant"] = relationship(back_populates="products")
