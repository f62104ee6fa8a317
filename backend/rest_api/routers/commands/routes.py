"""
Commands router.
Opens commands on tables, manages their items, closes and settles them.

Every endpoint is a thin controller over CommandLifecycle: the staff id
comes from the gateway header, typed domain errors map to HTTP codes
through AppException.
"""

from fastapi import APIRouter, Depends, Query, status

from shared.config.logging import rest_api_logger as logger
from shared.utils.schemas import (
    AddItemRequest,
    CommandSummaryOutput,
    CommandViewOutput,
    ErrorResponse,
    MarkPaidRequest,
    OpenCommandRequest,
)
from rest_api.routers._common import (
    Pagination,
    current_staff_id,
    get_lifecycle,
    get_pagination,
)
from rest_api.routers._common.outputs import summary_output, view_output
from rest_api.services.domain import CommandLifecycle


router = APIRouter(
    tags=["commands"],
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)


@router.post(
    "/api/commands",
    response_model=CommandViewOutput,
    status_code=status.HTTP_201_CREATED,
)
def open_command(
    body: OpenCommandRequest,
    staff_id: str = Depends(current_staff_id),
    lifecycle: CommandLifecycle = Depends(get_lifecycle),
) -> CommandViewOutput:
    """
    Open a command on an available table.

    The table becomes occupied. Fails with 409 when the table is not
    available or already has an open command.
    """
    view = lifecycle.open_command(body.table_id, staff_id, client_name=body.client_name)
    return view_output(view)


@router.get("/api/commands/{command_id}", response_model=CommandViewOutput)
def get_command(
    command_id: str,
    staff_id: str = Depends(current_staff_id),
    lifecycle: CommandLifecycle = Depends(get_lifecycle),
) -> CommandViewOutput:
    """Command with its items and totals (read-only)."""
    return view_output(lifecycle.get_command_view(command_id, staff_id=staff_id))


@router.post(
    "/api/commands/{command_id}/items",
    response_model=CommandViewOutput,
    status_code=status.HTTP_201_CREATED,
)
def add_item(
    command_id: str,
    body: AddItemRequest,
    staff_id: str = Depends(current_staff_id),
    lifecycle: CommandLifecycle = Depends(get_lifecycle),
) -> CommandViewOutput:
    """Add a product to an open command at the product's current price."""
    view = lifecycle.add_item(
        command_id,
        staff_id,
        body.product_id,
        body.quantity,
        notes=body.notes,
    )
    return view_output(view)


@router.delete("/api/commands/{command_id}/items/{item_id}", response_model=CommandViewOutput)
def remove_item(
    command_id: str,
    item_id: str,
    staff_id: str = Depends(current_staff_id),
    lifecycle: CommandLifecycle = Depends(get_lifecycle),
) -> CommandViewOutput:
    """Remove a line item from an open command."""
    return view_output(lifecycle.remove_item(command_id, staff_id, item_id))


@router.post("/api/commands/{command_id}/close", response_model=CommandViewOutput)
def close_command(
    command_id: str,
    staff_id: str = Depends(current_staff_id),
    lifecycle: CommandLifecycle = Depends(get_lifecycle),
) -> CommandViewOutput:
    """Close an open command and release its table."""
    return view_output(lifecycle.close_command(command_id, staff_id))


@router.post("/api/commands/{command_id}/pay", response_model=CommandViewOutput)
def mark_paid(
    command_id: str,
    body: MarkPaidRequest,
    staff_id: str = Depends(current_staff_id),
    lifecycle: CommandLifecycle = Depends(get_lifecycle),
) -> CommandViewOutput:
    """
    Record payment of a closed command.

    Requires a management role. paid_amount must be a decimal string or
    an integer.
    """
    view = lifecycle.mark_paid(command_id, staff_id, body.payment_method, body.paid_amount)
    return view_output(view)


@router.get(
    "/api/restaurants/{restaurant_id}/commands",
    response_model=list[CommandSummaryOutput],
)
def list_commands(
    restaurant_id: str,
    status_filter: str | None = Query(default=None, alias="status"),
    mine: bool = Query(default=False, description="Only commands opened by the caller"),
    pagination: Pagination = Depends(get_pagination),
    staff_id: str = Depends(current_staff_id),
    lifecycle: CommandLifecycle = Depends(get_lifecycle),
) -> list[CommandSummaryOutput]:
    """Commands of a restaurant, newest first."""
    summaries = lifecycle.list_commands(
        restaurant_id,
        staff_id,
        status=status_filter,
        only_mine=mine,
        limit=pagination.limit,
        offset=pagination.offset,
    )
    logger.debug("Commands listed", restaurant_id=restaurant_id, count=len(summaries))
    return [summary_output(s) for s in summaries]
