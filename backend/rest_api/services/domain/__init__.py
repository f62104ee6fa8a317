"""
Domain Services - business logic of the command lifecycle.

Structure:
    Router (thin controller)
        ↓
    Service (business logic)  ← YOU ARE HERE
        ↓
    Repository (data access, schema-tolerant)

Usage:
    from rest_api.services.domain import CommandLifecycle

    # In router
    lifecycle = CommandLifecycle(repo, RoleAuthorizer(repo), service_charge_rate=rate)
    view = lifecycle.open_command(table_id, staff_id)
"""

from .records import (
    RestaurantRecord,
    TableRecord,
    StaffRecord,
    ProductRecord,
    CommandRecord,
    CommandItemRecord,
)
from .schema_resolver import AliasGroup, EntitySchema, SchemaResolver
from .billing_calculator import BillingCalculator, BillTotals, ReconcileResult
from .table_registry import TableRegistry, TableStatusWrite, TableTransition
from .command_lifecycle import CommandLifecycle, CommandView, CommandSummary
from .table_service import TableService

__all__ = [
    # Records
    "RestaurantRecord",
    "TableRecord",
    "StaffRecord",
    "ProductRecord",
    "CommandRecord",
    "CommandItemRecord",
    # Schema
    "AliasGroup",
    "EntitySchema",
    "SchemaResolver",
    # Billing
    "BillingCalculator",
    "BillTotals",
    "ReconcileResult",
    # Tables
    "TableRegistry",
    "TableStatusWrite",
    "TableTransition",
    "TableService",
    # Lifecycle
    "CommandLifecycle",
    "CommandView",
    "CommandSummary",
]
