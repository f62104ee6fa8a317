"""
Command Lifecycle Service.

State machine of a command (open tab) from opening to payment:

    open --close--> closed --mark_paid--> paid

Items are added and removed only while the command is open. Opening a
command occupies its table; closing releases it. Every mutating operation
asks the authorizer first and runs inside one repository transaction, so
a rejected step leaves nothing half written.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from shared.config.constants import (
    COMMAND_TRANSITIONS,
    CommandAction,
    CommandStatus,
    Limits,
    PaymentMethod,
)
from shared.config.logging import command_logger as logger
from shared.utils.exceptions import (
    ForbiddenError,
    InvalidTableStateError,
    InvalidTransitionError,
    ValidationError,
)
from shared.utils.validators import (
    parse_money,
    quantize_money,
    validate_notes,
    validate_quantity,
    validate_service_charge_rate,
)

from rest_api.services.domain.billing_calculator import (
    BillTotals,
    BillingCalculator,
    ReconcileResult,
)
from rest_api.services.domain.records import (
    CommandItemRecord,
    CommandRecord,
    RepositoryFilters,
    TableRecord,
    utc_now,
)
from rest_api.services.domain.table_registry import TableRegistry

if TYPE_CHECKING:
    from rest_api.repositories.base import CommandRepository
    from rest_api.services.permissions import Authorizer


@dataclass(frozen=True)
class CommandView:
    """A command with its table, items and derived money."""

    command: CommandRecord
    table: TableRecord
    items: list[CommandItemRecord]
    totals: BillTotals
    total: Decimal
    total_was_recomputed: bool


@dataclass(frozen=True)
class CommandSummary:
    """One row of a command listing."""

    command: CommandRecord
    table: TableRecord | None
    total: Decimal
    total_was_recomputed: bool


class CommandLifecycle:
    """
    Domain service for the command state machine.

    Usage:
        lifecycle = CommandLifecycle(repo, RoleAuthorizer(repo))
        view = lifecycle.open_command(table_id, staff_id)
        lifecycle.add_item(view.command.id, staff_id, product_id, quantity=2)
        lifecycle.close_command(view.command.id, staff_id)
        lifecycle.mark_paid(view.command.id, manager_id, "cash", "58.00")
    """

    def __init__(
        self,
        repository: CommandRepository,
        authorizer: Authorizer,
        calculator: BillingCalculator | None = None,
        registry: TableRegistry | None = None,
        service_charge_rate: Any = Decimal("0"),
        clock: Callable[[], datetime] = utc_now,
    ):
        self._repo = repository
        self._authorizer = authorizer
        self._calculator = calculator or BillingCalculator()
        self._registry = registry or TableRegistry()
        self._rate = validate_service_charge_rate(service_charge_rate)
        self._clock = clock

    @property
    def service_charge_rate(self) -> Decimal:
        return self._rate

    # =========================================================================
    # Mutations
    # =========================================================================

    def open_command(
        self,
        table_id: str,
        staff_id: str,
        client_name: str | None = None,
    ) -> CommandView:
        """
        Open a command on an available table and occupy it.

        Raises:
            ForbiddenError: staff may not open commands in this restaurant.
            InvalidTableStateError: table is not available or already has an open command.
        """
        with self._repo.transaction():
            table = self._repo.get_table(table_id)
            self._authorize(staff_id, CommandAction.OPEN, table.restaurant_id)

            existing = self._repo.get_open_command_for_table(table.id)
            if existing is not None:
                raise InvalidTableStateError(
                    table.id,
                    table.status,
                    "open a command on",
                    open_command_id=existing.id,
                )

            table = self._registry.apply(self._repo, self._registry.occupy(table))

            now = self._clock()
            command = self._repo.save_command(
                CommandRecord(
                    table_id=table.id,
                    status=CommandStatus.OPEN,
                    staff_id=staff_id,
                    total=Decimal("0.00"),
                    created_at=now,
                    updated_at=now,
                    restaurant_id=table.restaurant_id,
                    client_name=(client_name or "").strip() or None,
                )
            )

        logger.info(
            "Command opened",
            command_id=command.id,
            table_id=table.id,
            staff_id=staff_id,
            restaurant_id=table.restaurant_id,
        )
        return self._view(command, table, [])

    def add_item(
        self,
        command_id: str,
        staff_id: str,
        product_id: str,
        quantity: int,
        notes: str | None = None,
    ) -> CommandView:
        """
        Add a line item with a snapshot of the product's current price.

        Raises:
            ValidationError: quantity outside 1..99 or product from another restaurant.
            InvalidTransitionError: command is not open.
        """
        with self._repo.transaction():
            command, table = self._load(command_id, for_update=True)
            self._authorize(staff_id, CommandAction.ADD_ITEM, table.restaurant_id)
            self._require_open(command, "add an item to")

            quantity = validate_quantity(quantity)
            notes = validate_notes(notes)

            product = self._repo.get_product(product_id)
            if product.restaurant_id != table.restaurant_id:
                raise ValidationError(
                    "Product does not belong to this restaurant",
                    field="product_id",
                    product_id=product_id,
                    restaurant_id=table.restaurant_id,
                )

            item = self._repo.insert_item(
                CommandItemRecord(
                    command_id=command.id,
                    product_id=product.id,
                    quantity=quantity,
                    unit_price=product.price,
                    notes=notes,
                    created_at=self._clock(),
                )
            )
            command, items = self._refresh_total(command)

        logger.info(
            "Item added",
            command_id=command.id,
            item_id=item.id,
            product_id=product.id,
            quantity=quantity,
            total=command.total,
        )
        return self._view(command, table, items)

    def remove_item(self, command_id: str, staff_id: str, item_id: str) -> CommandView:
        """
        Remove a line item from an open command.

        Raises:
            NotFoundError: item does not exist or belongs to another command.
            InvalidTransitionError: command is not open.
        """
        with self._repo.transaction():
            command, table = self._load(command_id, for_update=True)
            self._authorize(staff_id, CommandAction.REMOVE_ITEM, table.restaurant_id)
            self._require_open(command, "remove an item from")

            self._repo.delete_item(command.id, item_id)
            command, items = self._refresh_total(command)

        logger.info("Item removed", command_id=command.id, item_id=item_id, total=command.total)
        return self._view(command, table, items)

    def close_command(self, command_id: str, staff_id: str) -> CommandView:
        """
        Close an open command: finalize its total and release the table.

        Closing a command with no items is allowed. The final total is
        recomputed from the items; a cached total that disagrees is
        replaced and logged.

        Raises:
            InvalidTransitionError: command is not open.
            InvalidTableStateError: the table cannot be released (e.g. reserved).
        """
        with self._repo.transaction():
            command, table = self._load(command_id, for_update=True)
            self._authorize(staff_id, CommandAction.CLOSE, table.restaurant_id)
            self._require_transition(command, CommandStatus.CLOSED, "close")

            items = self._repo.list_items(command.id)
            total = self._calculator.compute_totals(items, self._rate).total
            healed = command.total != total
            if healed:
                logger.warning(
                    "Cached total healed at close",
                    command_id=command.id,
                    cached_total=command.total,
                    total=total,
                )

            now = self._clock()
            command = self._repo.save_command(
                replace(
                    command,
                    status=CommandStatus.CLOSED,
                    closed_at=now,
                    total=total,
                    updated_at=now,
                ),
                expected_status=CommandStatus.OPEN,
            )
            table = self._registry.apply(self._repo, self._registry.release(table))

        logger.info(
            "Command closed",
            command_id=command.id,
            table_id=table.id,
            total=command.total,
            total_was_recomputed=healed,
        )
        return self._view(command, table, items)

    def mark_paid(
        self,
        command_id: str,
        staff_id: str,
        payment_method: str,
        paid_amount: Any,
    ) -> CommandView:
        """
        Record payment of a closed command.

        ``paid_amount`` must be a decimal string, int or Decimal; floats
        are rejected. An amount below the total is accepted and logged.

        Raises:
            InvalidTransitionError: command is still open, or already paid.
            ValidationError: unknown payment method, missing or non-numeric amount.
        """
        with self._repo.transaction():
            command, table = self._load(command_id, for_update=True)
            self._authorize(staff_id, CommandAction.MARK_PAID, table.restaurant_id)

            if command.status == CommandStatus.OPEN:
                raise InvalidTransitionError(
                    "command", command.status, "mark paid", reason="must close first", command_id=command.id
                )
            if command.status == CommandStatus.PAID:
                raise InvalidTransitionError(
                    "command", command.status, "mark paid", reason="already paid", command_id=command.id
                )
            self._require_transition(command, CommandStatus.PAID, "mark paid")

            method = self._validate_payment_method(payment_method)
            amount = parse_money(paid_amount, field="paid_amount")
            if amount < 0:
                raise ValidationError("paid_amount must not be negative", field="paid_amount", value=str(amount))
            amount = quantize_money(amount)

            items = self._repo.list_items(command.id)
            final = self._calculator.reconcile(command.total, items, self._rate)
            if amount < final.total:
                logger.warning(
                    "Command paid below its total",
                    command_id=command.id,
                    total=final.total,
                    paid_amount=amount,
                )

            now = self._clock()
            command = self._repo.save_command(
                replace(
                    command,
                    status=CommandStatus.PAID,
                    paid_at=now,
                    payment_method=method,
                    paid_amount=amount,
                    total=final.total,
                    updated_at=now,
                ),
                expected_status=CommandStatus.CLOSED,
            )

        logger.info(
            "Command paid",
            command_id=command.id,
            payment_method=method,
            paid_amount=amount,
            total=command.total,
        )
        return self._view(command, table, items)

    # =========================================================================
    # Reads
    # =========================================================================

    def get_command_view(self, command_id: str, staff_id: str | None = None) -> CommandView:
        """
        Read-only view of a command with items and computed totals.

        A stale cached total is recomputed for the view but not written
        back (see reconcile_command). With staff_id the read is authorized.
        """
        command, table = self._load(command_id)
        if staff_id is not None:
            self._authorize(staff_id, CommandAction.VIEW, table.restaurant_id)
        return self._view(command, table, self._repo.list_items(command.id))

    def list_commands(
        self,
        restaurant_id: str,
        staff_id: str,
        status: str | None = None,
        only_mine: bool = False,
        limit: int = Limits.DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> list[CommandSummary]:
        """Commands of a restaurant, newest first, optionally by status or opener."""
        self._authorize(staff_id, CommandAction.VIEW, restaurant_id)

        if status is not None:
            status = status.strip().lower()
            if status not in CommandStatus.ALL:
                raise ValidationError(
                    f"status must be one of: {', '.join(CommandStatus.ALL)}",
                    field="status",
                    value=status,
                )

        filters = RepositoryFilters(
            status=status,
            staff_id=staff_id if only_mine else None,
            limit=limit,
            offset=offset,
        )
        commands = self._repo.list_commands(restaurant_id, filters)
        tables = {t.id: t for t in self._repo.list_tables(restaurant_id, RepositoryFilters(limit=Limits.MAX_PAGE_SIZE))}

        summaries = []
        for command in commands:
            if self._calculator.is_trusted(command.total):
                result = ReconcileResult(total=quantize_money(command.total), was_recomputed=False)
            else:
                result = self._calculator.reconcile(command.total, self._repo.list_items(command.id), self._rate)
            summaries.append(
                CommandSummary(
                    command=command,
                    table=tables.get(command.table_id),
                    total=result.total,
                    total_was_recomputed=result.was_recomputed,
                )
            )
        return summaries

    # =========================================================================
    # Healing
    # =========================================================================

    def reconcile_command(self, command_id: str, persist: bool = True) -> ReconcileResult:
        """
        Recompute a missing or non-positive cached total and optionally persist it.

        The write is conditional on the status read, so it never overwrites
        a concurrent transition. Running it twice is a no-op the second time
        unless the item set changed.
        """
        with self._repo.transaction():
            command = self._repo.get_command(command_id, for_update=True)
            items = self._repo.list_items(command.id)
            result = self._calculator.reconcile(command.total, items, self._rate)

            if result.was_recomputed and persist and command.total != result.total:
                self._repo.save_command(
                    replace(command, total=result.total, updated_at=self._clock()),
                    expected_status=command.status,
                )
                logger.info(
                    "Cached total healed",
                    command_id=command.id,
                    previous_total=command.total,
                    total=result.total,
                )

        return result

    # =========================================================================
    # Helpers
    # =========================================================================

    def _authorize(self, staff_id: str | None, action: str, restaurant_id: str | None) -> None:
        if not self._authorizer.is_allowed(staff_id, action, restaurant_id):
            raise ForbiddenError(action, staff_id=staff_id, restaurant_id=restaurant_id)

    def _load(self, command_id: str, for_update: bool = False) -> tuple[CommandRecord, TableRecord]:
        command = self._repo.get_command(command_id, for_update=for_update)
        table = self._repo.get_table(command.table_id)
        return command, table

    def _require_open(self, command: CommandRecord, operation: str) -> None:
        if command.status != CommandStatus.OPEN:
            raise InvalidTransitionError("command", command.status, operation, command_id=command.id)

    def _require_transition(self, command: CommandRecord, target: str, operation: str) -> None:
        if target not in COMMAND_TRANSITIONS.get(command.status, []):
            raise InvalidTransitionError("command", command.status, operation, command_id=command.id)

    def _refresh_total(self, command: CommandRecord) -> tuple[CommandRecord, list[CommandItemRecord]]:
        """Recompute and store the cached total; the write fails if the command left 'open'."""
        items = self._repo.list_items(command.id)
        totals = self._calculator.compute_totals(items, self._rate)
        command = self._repo.save_command(
            replace(command, total=totals.total, updated_at=self._clock()),
            expected_status=CommandStatus.OPEN,
        )
        return command, items

    @staticmethod
    def _validate_payment_method(payment_method: str | None) -> str:
        method = (payment_method or "").strip().lower()
        if method not in PaymentMethod.ALL:
            raise ValidationError(
                f"payment_method must be one of: {', '.join(PaymentMethod.ALL)}",
                field="payment_method",
                value=payment_method,
            )
        return method

    def _view(
        self,
        command: CommandRecord,
        table: TableRecord,
        items: list[CommandItemRecord],
    ) -> CommandView:
        totals = self._calculator.compute_totals(items, self._rate)
        result = self._calculator.reconcile(command.total, items, self._rate)
        return CommandView(
            command=command,
            table=table,
            items=items,
            totals=totals,
            total=result.total,
            total_was_recomputed=result.was_recomputed,
        )
