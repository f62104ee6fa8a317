"""
Centralized constants for the backend application.
Avoid magic strings for roles, statuses and lifecycle actions.

Usage:
    from shared.config.constants import CommandStatus, TableStatus, Roles

    if command.status == CommandStatus.OPEN:
        ...

    if role in MANAGEMENT_ROLES:
        ...
"""

from decimal import Decimal
from typing import Final


# =============================================================================
# Staff Roles
# =============================================================================


class Roles:
    """Staff role constants (lowercase, as stored in the users table)."""

    SUPER_ADMIN: Final[str] = "super_admin"
    ADMIN: Final[str] = "admin"
    MANAGER: Final[str] = "manager"
    WAITER: Final[str] = "waiter"

    ALL: Final[list[str]] = [SUPER_ADMIN, ADMIN, MANAGER, WAITER]


# Role groups for common access patterns
MANAGEMENT_ROLES: Final[frozenset[str]] = frozenset({Roles.SUPER_ADMIN, Roles.ADMIN, Roles.MANAGER})
ALL_STAFF_ROLES: Final[frozenset[str]] = frozenset(Roles.ALL)

# Roles that are not bound to a single restaurant
CROSS_TENANT_ROLES: Final[frozenset[str]] = frozenset({Roles.SUPER_ADMIN})


class StaffStatus:
    """Staff account status constants."""

    ACTIVE: Final[str] = "active"
    INACTIVE: Final[str] = "inactive"
    PENDING: Final[str] = "pending"

    ALL: Final[list[str]] = [ACTIVE, INACTIVE, PENDING]


# =============================================================================
# Entity Status Constants
# =============================================================================


class TableStatus:
    """Table occupancy status constants."""

    AVAILABLE: Final[str] = "available"
    OCCUPIED: Final[str] = "occupied"
    RESERVED: Final[str] = "reserved"

    ALL: Final[list[str]] = [AVAILABLE, OCCUPIED, RESERVED]


class CommandStatus:
    """Command (open tab) status constants."""

    OPEN: Final[str] = "open"
    CLOSED: Final[str] = "closed"
    PAID: Final[str] = "paid"

    ALL: Final[list[str]] = [OPEN, CLOSED, PAID]


class PaymentMethod:
    """Payment method labels recorded when a command is marked paid."""

    CASH: Final[str] = "cash"
    CREDIT: Final[str] = "credit"
    DEBIT: Final[str] = "debit"
    PIX: Final[str] = "pix"

    ALL: Final[list[str]] = [CASH, CREDIT, DEBIT, PIX]


# =============================================================================
# Status Transitions
# =============================================================================

# Valid command status transitions (from -> [allowed to states])
# Flow: open → closed → paid. Commands are never reopened.
COMMAND_TRANSITIONS: Final[dict[str, list[str]]] = {
    CommandStatus.OPEN: [CommandStatus.CLOSED],
    CommandStatus.CLOSED: [CommandStatus.PAID],
    CommandStatus.PAID: [],  # Terminal state
}

# Valid table status transitions
TABLE_TRANSITIONS: Final[dict[str, list[str]]] = {
    TableStatus.AVAILABLE: [TableStatus.OCCUPIED, TableStatus.RESERVED],
    TableStatus.OCCUPIED: [TableStatus.AVAILABLE],
    TableStatus.RESERVED: [TableStatus.AVAILABLE],
}


# =============================================================================
# Lifecycle Actions (authorization collaborator vocabulary)
# =============================================================================


class CommandAction:
    """Actions checked against the authorization collaborator."""

    OPEN: Final[str] = "command.open"
    ADD_ITEM: Final[str] = "command.add_item"
    REMOVE_ITEM: Final[str] = "command.remove_item"
    CLOSE: Final[str] = "command.close"
    MARK_PAID: Final[str] = "command.mark_paid"
    VIEW: Final[str] = "command.view"
    RESERVE_TABLE: Final[str] = "table.reserve"

    ALL: Final[list[str]] = [OPEN, ADD_ITEM, REMOVE_ITEM, CLOSE, MARK_PAID, VIEW, RESERVE_TABLE]


# Role-based action restrictions.
# Waiters run the floor (open, order, close); settlement is management only.
ACTION_ROLES: Final[dict[str, frozenset[str]]] = {
    CommandAction.OPEN: ALL_STAFF_ROLES,
    CommandAction.ADD_ITEM: ALL_STAFF_ROLES,
    CommandAction.REMOVE_ITEM: ALL_STAFF_ROLES,
    CommandAction.CLOSE: ALL_STAFF_ROLES,
    CommandAction.MARK_PAID: MANAGEMENT_ROLES,
    CommandAction.VIEW: ALL_STAFF_ROLES,
    CommandAction.RESERVE_TABLE: MANAGEMENT_ROLES,
}


# =============================================================================
# Validation Constants
# =============================================================================


class Limits:
    """Validation limits."""

    # Quantity limits
    MIN_QUANTITY: Final[int] = 1
    MAX_QUANTITY: Final[int] = 99

    # Money (fits NUMERIC(10, 2))
    MONEY_DECIMAL_PLACES: Final[int] = 2
    MAX_MONEY: Final[Decimal] = Decimal("99999999.99")
    MIN_SERVICE_CHARGE_RATE: Final[Decimal] = Decimal("0")
    MAX_SERVICE_CHARGE_RATE: Final[Decimal] = Decimal("1")

    # String lengths
    MAX_NAME_LENGTH: Final[int] = 200
    MAX_NOTES_LENGTH: Final[int] = 500
    MAX_SEARCH_TERM_LENGTH: Final[int] = 100

    # Pagination defaults
    DEFAULT_PAGE_SIZE: Final[int] = 50
    MAX_PAGE_SIZE: Final[int] = 200
