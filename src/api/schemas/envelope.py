"""Success envelopes wrapping every payload."""

from pydantic import BaseModel, Field

from src.domain.pagination import PageRequest, PaginationMeta


class DataResponse[T](BaseModel):
    """A single payload: ``{"data": ...}``."""

    data: T


class PaginatedResponse[T](BaseModel):
    """One page of a collection: ``{"data": [...], "meta": {...}}``."""

    data: list[T]
    meta: PaginationMeta = Field(..., description="Position of this page")

    @classmethod
    def build(
        cls, items: list[T], total: int, page: PageRequest
    ) -> "PaginatedResponse[T]":
        """Wrap ``items`` with the pagination block for ``page``."""
        return cls(data=items, meta=PaginationMeta.build(total, page))
