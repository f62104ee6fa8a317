"""
SQLAlchemy ORM Models Package.

Canonical schema of the service, one module per area:
- base: Base class and TimestampMixin
- tenant: Restaurant
- user: User (staff)
- table: Table
- catalog: Product
- order: Command, CommandItem

The SQL repository reads and writes through reflected tables, so
databases created by older apps with different spellings keep working;
these models are what ``init-db`` creates for new installations.
"""

# Base classes
from .base import Base, TimestampMixin, new_id

# Tenant
from .tenant import Restaurant

# Staff
from .user import User

# Floor
from .table import Table

# Catalog
from .catalog import Product

# Commands
from .order import Command, CommandItem

__all__ = [
    "Base",
    "TimestampMixin",
    "new_id",
    "Restaurant",
    "User",
    "Table",
    "Product",
    "Command",
    "CommandItem",
]
