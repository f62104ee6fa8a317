"""
Tests for role and tenant authorization.
"""

import pytest

from shared.config.constants import CommandAction
from rest_api.services.permissions import (
    NoAccessStrategy,
    RoleAuthorizer,
    WaiterStrategy,
    get_strategy,
)
from tests.support import InMemoryCommandRepository


@pytest.fixture
def repo():
    return InMemoryCommandRepository()


@pytest.fixture
def authorizer(repo):
    return RoleAuthorizer(repo)


class TestStrategies:
    """Role strategies."""

    def test_unknown_role_gets_no_access(self):
        """Should fall back to NoAccessStrategy for unknown or missing roles."""
        assert isinstance(get_strategy("kitchen"), NoAccessStrategy)
        assert isinstance(get_strategy(None), NoAccessStrategy)

    def test_role_lookup_is_case_insensitive(self):
        """Should accept role strings in any case."""
        assert isinstance(get_strategy("WAITER"), WaiterStrategy)

    def test_waiter_cannot_mark_paid(self):
        """Should keep settlement away from waiters."""
        assert get_strategy("waiter").can(CommandAction.MARK_PAID) is False
        assert get_strategy("waiter").can(CommandAction.CLOSE) is True

    @pytest.mark.parametrize("role", ["super_admin", "admin", "manager"])
    def test_management_can_mark_paid(self, role):
        """Should let management roles settle commands."""
        assert get_strategy(role).can(CommandAction.MARK_PAID) is True


class TestRoleAuthorizer:
    """Decisions against stored staff."""

    def test_waiter_allowed_in_own_restaurant(self, repo, authorizer):
        """Should allow a waiter to open commands in their restaurant."""
        waiter = repo.add_staff("waiter", "r1")

        assert authorizer.is_allowed(waiter.id, CommandAction.OPEN, "r1") is True

    def test_waiter_denied_in_other_restaurant(self, repo, authorizer):
        """Should deny actions in another restaurant."""
        waiter = repo.add_staff("waiter", "r1")

        assert authorizer.is_allowed(waiter.id, CommandAction.OPEN, "r2") is False

    def test_super_admin_spans_restaurants(self, repo, authorizer):
        """Should allow a super admin anywhere."""
        root = repo.add_staff("super_admin", None)

        assert authorizer.is_allowed(root.id, CommandAction.MARK_PAID, "r2") is True

    def test_admin_without_restaurant_denied(self, repo, authorizer):
        """Should deny non super admins that belong to no restaurant."""
        admin = repo.add_staff("admin", None)

        assert authorizer.is_allowed(admin.id, CommandAction.VIEW, "r1") is False

    def test_inactive_staff_denied(self, repo, authorizer):
        """Should deny inactive accounts regardless of role."""
        manager = repo.add_staff("manager", "r1", status="inactive")

        assert authorizer.is_allowed(manager.id, CommandAction.VIEW, "r1") is False

    def test_unknown_staff_denied(self, authorizer):
        """Should deny instead of raising for unknown ids."""
        assert authorizer.is_allowed("ghost", CommandAction.VIEW, "r1") is False

    def test_anonymous_denied(self, authorizer):
        """Should deny calls without a staff id."""
        assert authorizer.is_allowed(None, CommandAction.VIEW, "r1") is False
