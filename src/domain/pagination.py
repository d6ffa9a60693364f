"""Page arithmetic shared by every list operation."""

from pydantic import BaseModel, ConfigDict, Field

from src.core.constants import DEFAULT_PAGE, DEFAULT_PER_PAGE


class PageRequest(BaseModel):
    """A requested page of a collection.

    Pages are 1-based. Page 0 is accepted and behaves like page 1.
    """

    model_config = ConfigDict(frozen=True)

    page: int = Field(default=DEFAULT_PAGE, ge=0)
    per_page: int = Field(default=DEFAULT_PER_PAGE, ge=1)

    @property
    def offset(self) -> int:
        """Number of rows to skip."""
        return max(self.page - 1, 0) * self.per_page

    @property
    def limit(self) -> int:
        """Maximum number of rows to return."""
        return self.per_page


class PaginationMeta(BaseModel):
    """Pagination block returned next to every list payload."""

    total: int
    page: int
    per_page: int
    total_pages: int

    @classmethod
    def build(cls, total: int, request: PageRequest) -> "PaginationMeta":
        """Describe ``request`` against a collection of ``total`` rows."""
        return cls(
            total=total,
            page=request.page,
            per_page=request.per_page,
            total_pages=total_pages(total, request.per_page),
        )


def total_pages(total: int, per_page: int) -> int:
    """Number of pages needed to show ``total`` rows, ``per_page`` at a time.

    Args:
        total: Number of rows in the collection.
        per_page: Page size, at least 1.

    Returns:
        int: ``ceil(total / per_page)``; 0 for an empty collection.
    """
    return (total + per_page - 1) // per_page
