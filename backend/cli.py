"""
Command Ops CLI.

Operational commands: schema setup, demo data, command inspection and
cached-total maintenance.
"""

import sys

import typer
from rich.console import Console
from rich.table import Table
from sqlalchemy.exc import SQLAlchemyError

from shared.config.logging import setup_logging
from shared.config.settings import settings
from shared.utils.exceptions import AppException

app = typer.Typer(
    name="command-ops",
    help="Restaurant command lifecycle CLI",
    add_completion=False,
)
console = Console()


def _lifecycle(db):
    """Lifecycle for system jobs: no staff member behind the call."""
    from rest_api.repositories import SqlCommandRepository
    from rest_api.services.domain import CommandLifecycle
    from rest_api.services.permissions import AllowAllAuthorizer

    return CommandLifecycle(
        SqlCommandRepository(db),
        AllowAllAuthorizer(),
        service_charge_rate=settings.service_charge_rate,
    )


def _fail(message: str) -> None:
    console.print(f"[red]✗ {message}[/red]")
    raise typer.Exit(1)


# =============================================================================
# Database Commands
# =============================================================================

@app.command()
def init_db():
    """Create missing tables of the canonical schema."""
    from shared.infrastructure.db import engine
    from rest_api.models import Base

    console.print(f"[blue]Creating tables on: {engine.url.render_as_string(hide_password=True)}[/blue]")
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as e:
        _fail(f"Schema creation failed: {e}")
    console.print("[green]✓ Tables created/verified[/green]")


@app.command()
def seed(
    force: bool = typer.Option(False, "--force", "-f", help="Allow seeding in production"),
):
    """Seed the database with the demo restaurant."""
    from shared.infrastructure.db import get_db_context
    from rest_api.seed import seed as seed_database

    if settings.environment == "production" and not force:
        _fail("Cannot seed production without --force")

    try:
        with get_db_context() as db:
            restaurant = seed_database(db)
            restaurant_id = restaurant.id
    except SQLAlchemyError as e:
        _fail(f"Seeding failed: {e}")
    console.print(f"[green]✓ Demo restaurant ready: {restaurant_id}[/green]")


@app.command()
def schema_report():
    """Show which physical table and column backs each canonical field."""
    from shared.infrastructure.db import get_db_context
    from rest_api.repositories import SqlCommandRepository

    try:
        with get_db_context() as db:
            report = SqlCommandRepository(db).describe_layout()
    except AppException as e:
        _fail(str(e))

    for role, entry in report.items():
        if entry["table"] is None:
            console.print(f"[yellow]{role}: no table (optional)[/yellow]")
            continue

        table = Table(title=f"{role} -> {entry['table']}")
        table.add_column("Field", style="cyan")
        table.add_column("Column", style="green")
        table.add_column("Required", style="yellow")
        for field, column in entry["columns"].items():
            required = "yes" if field in entry["required"] else ""
            table.add_row(field, column or "[red]missing[/red]", required)
        console.print(table)


# =============================================================================
# Command Commands
# =============================================================================

@app.command()
def show_command(
    command_id: str = typer.Argument(..., help="Command ID"),
):
    """Show a command with its items and totals."""
    from shared.infrastructure.db import get_db_context

    try:
        with get_db_context() as db:
            view = _lifecycle(db).get_command_view(command_id)
    except AppException as e:
        _fail(str(e))

    command = view.command
    header = Table(title=f"Command {command.id}")
    header.add_column("Field", style="cyan")
    header.add_column("Value", style="green")
    header.add_row("Table", f"#{view.table.number}" if view.table.number is not None else view.table.id)
    header.add_row("Status", command.status)
    header.add_row("Opened by", command.staff_id or "-")
    header.add_row("Client", command.client_name or "-")
    header.add_row("Opened at", str(command.created_at or "-"))
    header.add_row("Closed at", str(command.closed_at or "-"))
    header.add_row("Paid at", str(command.paid_at or "-"))
    if command.payment_method:
        header.add_row("Payment", f"{command.payment_method} {command.paid_amount}")
    console.print(header)

    items = Table(title="Items")
    items.add_column("Product", style="cyan")
    items.add_column("Qty", justify="right")
    items.add_column("Unit", justify="right")
    items.add_column("Line", justify="right", style="green")
    for item in view.items:
        items.add_row(item.product_id, str(item.quantity), str(item.unit_price), str(item.line_total))
    console.print(items)

    totals = view.totals
    console.print(f"Subtotal: {totals.subtotal}")
    console.print(f"Service charge ({totals.service_charge_rate}): {totals.service_charge}")
    suffix = " [yellow](recomputed)[/yellow]" if view.total_was_recomputed else ""
    console.print(f"[bold]Total: {view.total}[/bold]{suffix}")


@app.command()
def reconcile_totals(
    restaurant: str = typer.Option(None, "--restaurant", "-r", help="Only this restaurant"),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Report without writing"),
):
    """Recompute and persist missing or non-positive cached totals."""
    from shared.config.constants import Limits
    from shared.infrastructure.db import get_db_context
    from rest_api.repositories import RepositoryFilters, SqlCommandRepository

    table = Table(title="Reconciled commands")
    table.add_column("Command", style="cyan")
    table.add_column("Status")
    table.add_column("Stored", justify="right", style="red")
    table.add_column("Computed", justify="right", style="green")

    scanned = 0
    healed = 0
    try:
        with get_db_context() as db:
            repo = SqlCommandRepository(db)
            lifecycle = _lifecycle(db)
            restaurant_ids = [restaurant] if restaurant else [r.id for r in repo.list_restaurants()]

            for restaurant_id in restaurant_ids:
                offset = 0
                while True:
                    page = repo.list_commands(
                        restaurant_id,
                        RepositoryFilters(limit=Limits.MAX_PAGE_SIZE, offset=offset),
                    )
                    for command in page:
                        scanned += 1
                        result = lifecycle.reconcile_command(command.id, persist=not dry_run)
                        if result.was_recomputed and command.total != result.total:
                            healed += 1
                            table.add_row(command.id, command.status, str(command.total), str(result.total))
                    if len(page) < Limits.MAX_PAGE_SIZE:
                        break
                    offset += Limits.MAX_PAGE_SIZE
    except AppException as e:
        _fail(str(e))

    if healed:
        console.print(table)
    verb = "Would heal" if dry_run else "Healed"
    console.print(f"[green]✓ {verb} {healed} of {scanned} commands[/green]")
    if dry_run:
        console.print("[yellow]This was a dry run - no changes made[/yellow]")


# =============================================================================
# Info Commands
# =============================================================================

@app.command()
def version():
    """Show version information."""
    table = Table(title="Command Ops Version")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")

    table.add_row("API", "0.1.0")
    table.add_row("Python", sys.version.split()[0])
    table.add_row("Environment", settings.environment)

    console.print(table)


@app.callback()
def main():
    setup_logging()


if __name__ == "__main__":
    app()
