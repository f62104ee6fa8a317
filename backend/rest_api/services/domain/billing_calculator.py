"""
Billing Calculator.

Derives a command's money from its line items. All arithmetic is Decimal:
subtotals are exact, totals are rounded to cents half up.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Protocol

from shared.config.logging import billing_logger as logger
from shared.utils.validators import (
    parse_stored_money,
    quantize_money,
    validate_service_charge_rate,
)

ZERO = Decimal("0.00")


class LineItem(Protocol):
    unit_price: Decimal
    quantity: int


@dataclass(frozen=True)
class BillTotals:
    """Subtotal, service charge and total for one item set."""

    subtotal: Decimal
    service_charge: Decimal
    total: Decimal
    service_charge_rate: Decimal


@dataclass(frozen=True)
class ReconcileResult:
    total: Decimal
    was_recomputed: bool


class BillingCalculator:
    """
    Pure billing arithmetic.

    The service-charge rate is always a parameter; the calculator holds no
    business default beyond 0.
    """

    def compute_subtotal(self, items: Iterable[LineItem]) -> Decimal:
        """Sum of unit_price * quantity. 0.00 for no items."""
        return sum((item.unit_price * item.quantity for item in items), ZERO)

    def compute_total(self, subtotal: Decimal, service_charge_rate: Any = Decimal("0")) -> Decimal:
        """subtotal * (1 + rate), rounded to cents. Rate must be within [0, 1]."""
        rate = validate_service_charge_rate(service_charge_rate)
        return quantize_money(subtotal * (1 + rate))

    def compute_service_charge(self, subtotal: Decimal, service_charge_rate: Any = Decimal("0")) -> Decimal:
        return self.compute_total(subtotal, service_charge_rate) - quantize_money(subtotal)

    def compute_totals(self, items: Iterable[LineItem], service_charge_rate: Any = Decimal("0")) -> BillTotals:
        rate = validate_service_charge_rate(service_charge_rate)
        subtotal = self.compute_subtotal(items)
        total = self.compute_total(subtotal, rate)
        return BillTotals(
            subtotal=subtotal,
            service_charge=total - quantize_money(subtotal),
            total=total,
            service_charge_rate=rate,
        )

    @staticmethod
    def is_trusted(stored_total: Any) -> bool:
        """A stored total is trusted when present, finite and greater than zero."""
        parsed = parse_stored_money(stored_total)
        return parsed is not None and parsed > 0

    def reconcile(
        self,
        stored_total: Any,
        items: Iterable[LineItem],
        service_charge_rate: Any = Decimal("0"),
    ) -> ReconcileResult:
        """
        Decide the authoritative total for a command.

        A trusted stored total is returned as is (rounded to cents);
        anything else is recomputed from the items. Idempotent: the same
        inputs always give the same result.
        """
        if self.is_trusted(stored_total):
            return ReconcileResult(
                total=quantize_money(parse_stored_money(stored_total)),
                was_recomputed=False,
            )

        total = self.compute_totals(items, service_charge_rate).total
        logger.debug("Stored total recomputed", stored_total=stored_total, total=total)
        return ReconcileResult(total=total, was_recomputed=True)
