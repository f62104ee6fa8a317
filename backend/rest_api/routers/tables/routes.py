"""
Tables router.
Floor plan, product picker and reservation toggling for a restaurant.
"""

from fastapi import APIRouter, Depends, Query

from shared.utils.schemas import ErrorResponse, ProductOutput, TableOutput
from rest_api.routers._common import (
    Pagination,
    current_staff_id,
    get_pagination,
    get_table_service,
)
from rest_api.routers._common.outputs import product_output, table_output
from rest_api.services.domain import TableService


router = APIRouter(
    tags=["tables"],
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)


@router.get("/api/restaurants/{restaurant_id}/tables", response_model=list[TableOutput])
def list_tables(
    restaurant_id: str,
    status_filter: str | None = Query(default=None, alias="status"),
    staff_id: str = Depends(current_staff_id),
    service: TableService = Depends(get_table_service),
) -> list[TableOutput]:
    """Tables of a restaurant ordered by number."""
    tables = service.list_tables(restaurant_id, staff_id, status=status_filter)
    return [table_output(t) for t in tables]


@router.get("/api/restaurants/{restaurant_id}/products", response_model=list[ProductOutput])
def list_products(
    restaurant_id: str,
    search: str | None = Query(default=None, max_length=100),
    category: str | None = Query(default=None, max_length=100),
    pagination: Pagination = Depends(get_pagination),
    staff_id: str = Depends(current_staff_id),
    service: TableService = Depends(get_table_service),
) -> list[ProductOutput]:
    """Product picker for the add-item screen."""
    products = service.list_products(
        restaurant_id,
        staff_id,
        search=search,
        category=category,
        limit=pagination.limit,
        offset=pagination.offset,
    )
    return [product_output(p) for p in products]


@router.post("/api/tables/{table_id}/reserve", response_model=TableOutput)
def reserve_table(
    table_id: str,
    staff_id: str = Depends(current_staff_id),
    service: TableService = Depends(get_table_service),
) -> TableOutput:
    """Mark an available table as reserved. Requires a management role."""
    return table_output(service.reserve(table_id, staff_id))


@router.post("/api/tables/{table_id}/unreserve", response_model=TableOutput)
def unreserve_table(
    table_id: str,
    staff_id: str = Depends(current_staff_id),
    service: TableService = Depends(get_table_service),
) -> TableOutput:
    """Return a reserved table to available."""
    return table_output(service.unreserve(table_id, staff_id))
