from typing import List, Any
from math import ceil
from pydantic import BaseModel


class PaginationParams(BaseModel):
    page: int = 1
    limit: int = 50
    max_limit: int = 5000

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def validate_bounds(self):
        if self.page < 1:
            raise ValueError("Page must be >= 1")
        if self.limit < 1 or self.limit > self.max_limit:
            raise ValueError(f"Limit must be between 1 and {self.max_limit}")


class PaginatedResult(BaseModel):
    items: List[Any]
    total: int
    page: int
    limit: int
    total_pages: int
    has_next: bool
    has_prev: bool


def build_page(items: List[Any], total: int, params: PaginationParams) -> PaginatedResult:
    total_pages = ceil(total / params.limit) if total > 0 else 0

    return PaginatedResult(
        items=items,
        total=total,
        page=params.page,
        limit=params.limit,
        total_pages=total_pages,
        has_next=params.page < total_pages,
        has_prev=params.page > 1
    )
