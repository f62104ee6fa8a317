"""
User Model: staff accounts.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import Roles, StaffStatus

from .base import Base, TimestampMixin, new_id

if TYPE_CHECKING:
    from .tenant import Restaurant


class User(TimestampMixin, Base):
    """
    Staff member.
    Authentication lives outside this service; only identity, role and
    status are used for authorization.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=Roles.WAITER)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=StaffStatus.ACTIVE)
    # NULL only for super_admin
    restaurant_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("restaurants.id"), nullable=True, index=True
    )

    __table_args__ = (
        Index("ix_users_restaurant_role", "restaurant_id", "role"),
    )

    # Relationships
    restaurant: Mapped[Optional["Restaurant"]] = relationship(back_populates="staff")
