"""
Record -> response schema conversion.
"""

from rest_api.services.domain import (
    CommandItemRecord,
    CommandRecord,
    CommandSummary,
    CommandView,
    ProductRecord,
    TableRecord,
)
from shared.utils.schemas import (
    BillTotalsOutput,
    CommandItemOutput,
    CommandOutput,
    CommandSummaryOutput,
    CommandViewOutput,
    ProductOutput,
    TableOutput,
)


def table_output(table: TableRecord) -> TableOutput:
    return TableOutput(
        id=table.id,
        restaurant_id=table.restaurant_id,
        number=table.number,
        capacity=table.capacity,
        status=table.status,
    )


def product_output(product: ProductRecord) -> ProductOutput:
    return ProductOutput(
        id=product.id,
        restaurant_id=product.restaurant_id,
        name=product.name,
        description=product.description,
        price=product.price,
        category=product.category,
    )


def item_output(item: CommandItemRecord) -> CommandItemOutput:
    return CommandItemOutput(
        id=item.id,
        product_id=item.product_id,
        quantity=item.quantity,
        unit_price=item.unit_price,
        line_total=item.line_total,
        notes=item.notes,
        created_at=item.created_at,
    )


def command_output(command: CommandRecord) -> CommandOutput:
    return CommandOutput(
        id=command.id,
        table_id=command.table_id,
        staff_id=command.staff_id,
        restaurant_id=command.restaurant_id,
        status=command.status,
        total=command.total,
        client_name=command.client_name,
        created_at=command.created_at,
        closed_at=command.closed_at,
        paid_at=command.paid_at,
        payment_method=command.payment_method,
        paid_amount=command.paid_amount,
    )


def view_output(view: CommandView) -> CommandViewOutput:
    return CommandViewOutput(
        command=command_output(view.command),
        table=table_output(view.table),
        items=[item_output(item) for item in view.items],
        totals=BillTotalsOutput(
            subtotal=view.totals.subtotal,
            service_charge=view.totals.service_charge,
            service_charge_rate=view.totals.service_charge_rate,
            total=view.totals.total,
        ),
        total=view.total,
        total_was_recomputed=view.total_was_recomputed,
    )


def summary_output(summary: CommandSummary) -> CommandSummaryOutput:
    command = summary.command
    return CommandSummaryOutput(
        id=command.id,
        table_id=command.table_id,
        table_number=summary.table.number if summary.table else None,
        staff_id=command.staff_id,
        status=command.status,
        client_name=command.client_name,
        created_at=command.created_at,
        closed_at=command.closed_at,
        paid_at=command.paid_at,
        total=summary.total,
        total_was_recomputed=summary.total_was_recomputed,
    )
