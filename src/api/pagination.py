"""Page query parsing and paged responses."""

from dataclasses import dataclass
from typing import Generic, List, TypeVar

from fastapi import Query
from pydantic import BaseModel

from src.config import settings


T = TypeVar("T")


@dataclass
class PageQuery:
    page: int
    page_size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class Page(BaseModel, Generic[T]):
    """One page of results."""
    page: int
    page_size: int
    total: int
    items: List[T]


def get_page_query(
    p: int = Query(1, description="Page number, starting at 1"),
    page_size: int = Query(0, description="Items per page"),
) -> PageQuery:
    """
    Dependency that normalizes paging parameters.

    Pages below 1 become 1; a non-positive page size falls back to the
    configured default, and sizes above the configured maximum are capped.
    """
    if p < 1:
        p = 1
    if page_size <= 0:
        page_size = settings.items_per_page
    page_size = min(page_size, settings.max_page_size)
    return PageQuery(page=p, page_size=page_size)
