"""
Permission Strategy Pattern implementation.

Usage:
    from rest_api.services.permissions import RoleAuthorizer

    authorizer = RoleAuthorizer(repository)
    if not authorizer.is_allowed(staff_id, CommandAction.CLOSE, restaurant_id):
        raise ForbiddenError(CommandAction.CLOSE)
"""

from .strategies import (
    PermissionStrategy,
    SuperAdminStrategy,
    AdminStrategy,
    ManagerStrategy,
    WaiterStrategy,
    NoAccessStrategy,
    get_strategy,
)
from .context import Authorizer, RoleAuthorizer, AllowAllAuthorizer

__all__ = [
    # Strategies
    "PermissionStrategy",
    "SuperAdminStrategy",
    "AdminStrategy",
    "ManagerStrategy",
    "WaiterStrategy",
    "NoAccessStrategy",
    "get_strategy",
    # Authorizers
    "Authorizer",
    "RoleAuthorizer",
    "AllowAllAuthorizer",
]
