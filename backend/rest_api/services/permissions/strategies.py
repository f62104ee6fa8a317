"""
Permission Strategy implementations.
Strategy Pattern for role-based access control.

Each strategy answers two questions for one staff role: which lifecycle
actions the role may perform, and whether it may act outside its own
restaurant.
"""

from abc import ABC

from shared.config.constants import (
    ACTION_ROLES,
    CROSS_TENANT_ROLES,
    Roles,
)


class PermissionStrategy(ABC):
    """Base strategy: permissions derive from the ACTION_ROLES table."""

    role: str = ""

    def can(self, action: str) -> bool:
        return self.role in ACTION_ROLES.get(action, frozenset())

    @property
    def spans_tenants(self) -> bool:
        return self.role in CROSS_TENANT_ROLES

    def can_access_restaurant(self, staff_restaurant_id: str | None, restaurant_id: str | None) -> bool:
        if self.spans_tenants:
            return True
        if staff_restaurant_id is None or restaurant_id is None:
            return False
        return staff_restaurant_id == restaurant_id


class SuperAdminStrategy(PermissionStrategy):
    """Platform operator: every action, every restaurant."""

    role = Roles.SUPER_ADMIN


class AdminStrategy(PermissionStrategy):
    role = Roles.ADMIN


class ManagerStrategy(PermissionStrategy):
    role = Roles.MANAGER


class WaiterStrategy(PermissionStrategy):
    """Floor staff: open, order and close; no settlement."""

    role = Roles.WAITER


class NoAccessStrategy(PermissionStrategy):
    """Unknown roles can do nothing."""

    def can(self, action: str) -> bool:
        return False

    def can_access_restaurant(self, staff_restaurant_id: str | None, restaurant_id: str | None) -> bool:
        return False


STRATEGY_REGISTRY: dict[str, PermissionStrategy] = {
    Roles.SUPER_ADMIN: SuperAdminStrategy(),
    Roles.ADMIN: AdminStrategy(),
    Roles.MANAGER: ManagerStrategy(),
    Roles.WAITER: WaiterStrategy(),
}


def get_strategy(role: str | None) -> PermissionStrategy:
    """Strategy for a role; NoAccessStrategy for unknown or missing roles."""
    if not role:
        return NoAccessStrategy()
    return STRATEGY_REGISTRY.get(role.strip().lower(), NoAccessStrategy())
