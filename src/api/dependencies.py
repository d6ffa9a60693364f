"""FastAPI dependencies shared by the routers."""

from typing import Annotated

from fastapi import Depends, Query

from src.core.config import get_settings
from src.domain.pagination import PageRequest
from src.infrastructure.database.dependencies import DatabaseSession
from src.services import PostService, UserService


def get_user_service(db: DatabaseSession) -> UserService:
    """Build the user service for the request session."""
    return UserService(db)


def get_post_service(db: DatabaseSession) -> PostService:
    """Build the post service for the request session."""
    return PostService(db)


def get_page_request(
    page: Annotated[int, Query(ge=0, description="1-based page number")] = 1,
    per_page: Annotated[
        int | None, Query(ge=1, description="Items per page, capped at the maximum")
    ] = None,
) -> PageRequest:
    """Read ``page`` and ``per_page`` from the query string.

    ``per_page`` defaults to ``pagination_config.default_per_page`` and is
    clamped to ``pagination_config.max_per_page``.
    """
    config = get_settings().pagination_config
    size = config.default_per_page if per_page is None else per_page
    return PageRequest(page=page, per_page=min(size, config.max_per_page))


UserServiceDep = Annotated[UserService, Depends(get_user_service)]
PostServiceDep = Annotated[PostService, Depends(get_post_service)]
PageDep = Annotated[PageRequest, Depends(get_page_request)]
