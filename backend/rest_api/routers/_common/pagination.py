"""
Limit/offset paging for list endpoints.

Bounds live on the Query declarations, so a Pagination produced by
get_pagination is always within 1..Limits.MAX_PAGE_SIZE.
"""

from typing import NamedTuple

from fastapi import Query

from shared.config.constants import Limits


class Pagination(NamedTuple):
    limit: int = Limits.DEFAULT_PAGE_SIZE
    offset: int = 0


def get_pagination(
    limit: int = Query(Limits.DEFAULT_PAGE_SIZE, ge=1, le=Limits.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
) -> Pagination:
    return Pagination(limit, offset)
