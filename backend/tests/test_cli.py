"""
Tests for the operational CLI.
"""

from contextlib import contextmanager
from dataclasses import replace
from decimal import Decimal

import pytest
from typer.testing import CliRunner

import cli
from rest_api.models import Restaurant
from rest_api.seed import DEMO_MENU, seed


runner = CliRunner()


@pytest.fixture
def cli_db(db_session, monkeypatch):
    """Run CLI commands on the test session instead of the configured database."""
    @contextmanager
    def shared_session():
        yield db_session

    monkeypatch.setattr("shared.infrastructure.db.get_db_context", shared_session)
    monkeypatch.setattr("shared.infrastructure.db.engine", db_session.get_bind())
    # Keep the root logger away from the runner's captured stdout
    monkeypatch.setattr(cli, "setup_logging", lambda: None)
    return db_session


class TestSeed:
    """Demo data."""

    def test_seed_is_idempotent(self, db_session):
        """Should create the demo restaurant once."""
        first = seed(db_session)
        second = seed(db_session)

        assert first.id == second.id
        assert db_session.query(Restaurant).count() == 1

    def test_seed_command(self, cli_db):
        result = runner.invoke(cli.app, ["seed"])

        assert result.exit_code == 0, result.output
        assert "Demo restaurant ready" in result.output


class TestCommands:
    """Inspection and healing."""

    @pytest.fixture
    def paid_command(self, cli_db, lifecycle, repository, seed_tables, seed_waiter, seed_manager, seed_products):
        command_id = lifecycle.open_command(seed_tables[1].id, seed_waiter.id).command.id
        lifecycle.add_item(command_id, seed_waiter.id, seed_products["burger"].id, 2)
        lifecycle.close_command(command_id, seed_waiter.id)
        lifecycle.mark_paid(command_id, seed_manager.id, "cash", "50.00")
        return command_id

    def test_show_command(self, paid_command):
        """Should print status and total."""
        result = runner.invoke(cli.app, ["show-command", paid_command])

        assert result.exit_code == 0, result.output
        assert "paid" in result.output
        assert "50.00" in result.output

    def test_show_unknown_command(self, cli_db):
        """Should exit non-zero for unknown commands."""
        result = runner.invoke(cli.app, ["show-command", "nope"])

        assert result.exit_code == 1

    def test_reconcile_totals(self, paid_command, repository, seed_restaurant):
        """Should heal a missing total, honoring --dry-run."""
        with repository.transaction():
            command = repository.get_command(paid_command)
            repository.save_command(replace(command, total=None))

        dry = runner.invoke(cli.app, ["reconcile-totals", "--dry-run"])
        assert dry.exit_code == 0, dry.output
        assert "Would heal 1 of 1" in dry.output
        assert repository.get_command(paid_command).total is None

        real = runner.invoke(cli.app, ["reconcile-totals", "--restaurant", seed_restaurant.id])
        assert real.exit_code == 0, real.output
        assert "Healed 1 of 1" in real.output
        assert repository.get_command(paid_command).total == Decimal("50.00")

    def test_schema_report(self, cli_db):
        """Should show the canonical tables."""
        result = runner.invoke(cli.app, ["schema-report"])

        assert result.exit_code == 0, result.output
        assert "command_items" in result.output
        assert "restaurants" in result.output


def test_demo_menu_prices_are_exact():
    """Demo prices are Decimals with cents."""
    assert all(price == price.quantize(Decimal("0.01")) for _, _, price, _ in DEMO_MENU)
