"""
Authorization collaborator used by the lifecycle and table services.

The services only depend on the ``Authorizer`` protocol
(``is_allowed(staff_id, action, restaurant_id) -> bool``); ``RoleAuthorizer``
is the implementation backed by staff records and role strategies.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from shared.config.constants import StaffStatus
from shared.config.logging import audit_authorization_event
from shared.utils.exceptions import NotFoundError

from .strategies import get_strategy

if TYPE_CHECKING:
    from rest_api.repositories.base import CommandRepository


class Authorizer(Protocol):
    def is_allowed(self, staff_id: str | None, action: str, restaurant_id: str | None) -> bool:
        ...


class RoleAuthorizer:
    """
    Role and tenant check against the staff table.

    A staff member is allowed when the account is active, the role's
    strategy grants the action and the restaurant matches (super admins
    span every restaurant). Unknown staff are denied, not errors.
    """

    def __init__(self, repository: CommandRepository):
        self._repo = repository

    def is_allowed(self, staff_id: str | None, action: str, restaurant_id: str | None) -> bool:
        if not staff_id:
            return self._decide(False, action, staff_id, restaurant_id, "anonymous")

        try:
            staff = self._repo.get_staff(staff_id)
        except NotFoundError:
            return self._decide(False, action, staff_id, restaurant_id, "unknown staff")

        if staff.status != StaffStatus.ACTIVE:
            return self._decide(False, action, staff_id, restaurant_id, f"staff {staff.status}")

        strategy = get_strategy(staff.role)
        if not strategy.can(action):
            return self._decide(False, action, staff_id, restaurant_id, f"role {staff.role}")

        if not strategy.can_access_restaurant(staff.restaurant_id, restaurant_id):
            return self._decide(False, action, staff_id, restaurant_id, "other restaurant")

        return self._decide(True, action, staff_id, restaurant_id)

    @staticmethod
    def _decide(
        allowed: bool,
        action: str,
        staff_id: str | None,
        restaurant_id: str | None,
        reason: str | None = None,
    ) -> bool:
        audit_authorization_event(action, staff_id, restaurant_id, allowed, reason=reason)
        return allowed


class AllowAllAuthorizer:
    """Authorizer for trusted system jobs (CLI healing, seeding)."""

    def is_allowed(self, staff_id: str | None, action: str, restaurant_id: str | None) -> bool:
        return True
