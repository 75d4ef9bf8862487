"""Limit/offset paging for list endpoints."""

from __future__ import annotations

from typing import Generic, TypeVar

from fastapi import Query
from pydantic import BaseModel

ItemT = TypeVar("ItemT")


class PaginationParams(BaseModel):
    limit: int
    offset: int


def get_pagination_params(
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
) -> PaginationParams:
    """Read `limit` and `offset` query parameters."""
    return PaginationParams(limit=limit, offset=offset)


class Page(BaseModel, Generic[ItemT]):
    """One page of results plus the total row count."""

    items: list[ItemT]
    total: int
    limit: int
    offset: int
    has_more: bool


def build_page(items: list[ItemT], total: int, params: PaginationParams) -> Page[ItemT]:
    return Page(
        items=items,
        total=total,
        limit=params.limit,
        offset=params.offset,
        has_more=params.offset + len(items) < total,
    )
