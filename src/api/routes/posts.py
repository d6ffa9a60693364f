"""Post endpoints."""

from http import HTTPStatus
from typing import Annotated

from fastapi import APIRouter, Query, Response

from src.api.dependencies import PageDep, PostServiceDep
from src.api.schemas.envelope import DataResponse, PaginatedResponse
from src.api.schemas.errors import ErrorResponse, ValidationErrorResponse
from src.api.schemas.posts import PostListItemResponse, PostResponse
from src.domain.dto import CreatePostDto, UpdatePostDto

router = APIRouter(prefix="/posts", tags=["posts"])

NOT_FOUND = {HTTPStatus.NOT_FOUND.value: {"model": ErrorResponse}}
UNPROCESSABLE = {
    HTTPStatus.BAD_REQUEST.value: {"model": ErrorResponse},
    HTTPStatus.UNPROCESSABLE_ENTITY.value: {"model": ValidationErrorResponse},
}


@router.get("")
async def list_posts(
    service: PostServiceDep,
    page: PageDep,
    published: Annotated[
        bool | None, Query(description="Only published (true) or draft (false) posts")
    ] = None,
) -> PaginatedResponse[PostListItemResponse]:
    """List posts, newest first."""
    posts, total = await service.list_page(page, published=published)
    items = [PostListItemResponse.from_entity(post, author) for post, author in posts]
    return PaginatedResponse[PostListItemResponse].build(items, total, page)


@router.get("/{post_id}", responses=NOT_FOUND)
async def get_post(post_id: int, service: PostServiceDep) -> DataResponse[PostResponse]:
    """Fetch one post with its author and metadata."""
    post, author = await service.get(post_id)
    return DataResponse(data=PostResponse.from_entity(post, author))


@router.post(
    "", status_code=HTTPStatus.CREATED, responses={**NOT_FOUND, **UNPROCESSABLE}
)
async def create_post(
    dto: CreatePostDto, service: PostServiceDep
) -> DataResponse[PostResponse]:
    """Create a post; the author must exist."""
    post, author = await service.create(dto)
    return DataResponse(data=PostResponse.from_entity(post, author))


@router.put("/{post_id}", responses={**NOT_FOUND, **UNPROCESSABLE})
async def update_post(
    post_id: int, dto: UpdatePostDto, service: PostServiceDep
) -> DataResponse[PostResponse]:
    """Update the provided fields of a post; metadata is replaced as a whole."""
    post, author = await service.update(post_id, dto)
    return DataResponse(data=PostResponse.from_entity(post, author))


@router.delete(
    "/{post_id}",
    status_code=HTTPStatus.NO_CONTENT,
    response_class=Response,
    responses=NOT_FOUND,
)
async def delete_post(post_id: int, service: PostServiceDep) -> Response:
    """Delete a post."""
    await service.delete(post_id)
    return Response(status_code=HTTPStatus.NO_CONTENT)
