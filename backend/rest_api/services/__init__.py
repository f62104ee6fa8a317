"""
Services module for business logic.

- domain/: command lifecycle, billing, table occupancy, schema resolution
- permissions/: Strategy pattern for role-based access control

Usage:
    from rest_api.services.domain import CommandLifecycle
    from rest_api.services.permissions import RoleAuthorizer
"""
