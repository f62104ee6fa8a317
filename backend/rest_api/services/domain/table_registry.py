"""
Table Registry - table occupancy transitions.

Transitions are pure: each returns the table's new state plus a
``TableStatusWrite`` describing the conditional update that makes it
durable. ``apply`` performs that write through the repository, so two
waiters racing to seat the same table cannot both win.

    available --occupy--> occupied --release--> available
    available --reserve--> reserved --unreserve--> available
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from shared.config.constants import TABLE_TRANSITIONS, TableStatus
from shared.config.logging import table_logger as logger
from shared.utils.exceptions import InvalidTableStateError

from rest_api.services.domain.records import TableRecord

if TYPE_CHECKING:
    from rest_api.repositories.base import CommandRepository


@dataclass(frozen=True)
class TableStatusWrite:
    """Conditional status update: set new_status only if the row still holds expected_status."""

    table_id: str
    new_status: str
    expected_status: str


@dataclass(frozen=True)
class TableTransition:
    operation: str
    table: TableRecord
    previous_status: str
    write: TableStatusWrite | None


class TableRegistry:
    """Computes and applies table status transitions."""

    def occupy(self, table: TableRecord) -> TableTransition:
        return self._transition(table, "occupy", TableStatus.AVAILABLE, TableStatus.OCCUPIED)

    def release(self, table: TableRecord) -> TableTransition:
        """occupied -> available. Already available is a no-op."""
        if table.status == TableStatus.AVAILABLE:
            logger.info("Table already available, release skipped", table_id=table.id)
            return TableTransition(
                operation="release",
                table=table,
                previous_status=table.status,
                write=None,
            )
        return self._transition(table, "release", TableStatus.OCCUPIED, TableStatus.AVAILABLE)

    def reserve(self, table: TableRecord) -> TableTransition:
        return self._transition(table, "reserve", TableStatus.AVAILABLE, TableStatus.RESERVED)

    def unreserve(self, table: TableRecord) -> TableTransition:
        return self._transition(table, "unreserve", TableStatus.RESERVED, TableStatus.AVAILABLE)

    def apply(self, repository: CommandRepository, transition: TableTransition) -> TableRecord:
        """
        Persist a transition with a conditional update.

        When the update matches no row the table is re-read: a release that
        finds the table already available is accepted, anything else raises
        InvalidTableStateError with the status actually stored.
        """
        write = transition.write
        if write is None:
            return transition.table

        applied = repository.update_table_status(
            write.table_id,
            write.new_status,
            expected_current_status=write.expected_status,
        )
        if applied:
            logger.info(
                "Table status changed",
                table_id=write.table_id,
                from_status=write.expected_status,
                to_status=write.new_status,
            )
            return transition.table

        current = repository.get_table(write.table_id)
        if transition.operation == "release" and current.status == TableStatus.AVAILABLE:
            logger.info("Table released concurrently", table_id=current.id)
            return current

        raise InvalidTableStateError(
            current.id,
            current.status,
            transition.operation,
            expected_status=write.expected_status,
        )

    @staticmethod
    def _transition(
        table: TableRecord,
        operation: str,
        from_status: str,
        to_status: str,
    ) -> TableTransition:
        if table.status != from_status or to_status not in TABLE_TRANSITIONS.get(table.status, []):
            raise InvalidTableStateError(
                table.id,
                table.status,
                operation,
                expected_status=from_status,
            )

        return TableTransition(
            operation=operation,
            table=replace(table, status=to_status),
            previous_status=table.status,
            write=TableStatusWrite(
                table_id=table.id,
                new_status=to_status,
                expected_status=from_status,
            ),
        )
