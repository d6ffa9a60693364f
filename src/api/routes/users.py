"""User endpoints."""

from http import HTTPStatus

from fastapi import APIRouter, Response

from src.api.dependencies import PageDep, PostServiceDep, UserServiceDep
from src.api.schemas.envelope import DataResponse, PaginatedResponse
from src.api.schemas.errors import ErrorResponse, ValidationErrorResponse
from src.api.schemas.posts import PostListItemResponse
from src.api.schemas.users import UserResponse
from src.domain.dto import CreateUserDto, UpdateUserDto

router = APIRouter(prefix="/users", tags=["users"])

NOT_FOUND = {HTTPStatus.NOT_FOUND.value: {"model": ErrorResponse}}
UNPROCESSABLE = {
    HTTPStatus.BAD_REQUEST.value: {"model": ErrorResponse},
    HTTPStatus.UNPROCESSABLE_ENTITY.value: {"model": ValidationErrorResponse},
}
CONFLICT = {HTTPStatus.CONFLICT.value: {"model": ErrorResponse}}


@router.get("")
async def list_users(
    service: UserServiceDep, page: PageDep
) -> PaginatedResponse[UserResponse]:
    """List users ordered by id."""
    users, total = await service.list_page(page)
    items = [UserResponse.model_validate(user) for user in users]
    return PaginatedResponse[UserResponse].build(items, total, page)


@router.get("/{user_id}", responses=NOT_FOUND)
async def get_user(user_id: int, service: UserServiceDep) -> DataResponse[UserResponse]:
    """Fetch one user."""
    user = await service.get(user_id)
    return DataResponse(data=UserResponse.model_validate(user))


@router.post(
    "", status_code=HTTPStatus.CREATED, responses={**UNPROCESSABLE, **CONFLICT}
)
async def create_user(
    dto: CreateUserDto, service: UserServiceDep
) -> DataResponse[UserResponse]:
    """Create a user; the email must not be in use."""
    user = await service.create(dto)
    return DataResponse(data=UserResponse.model_validate(user))


@router.put("/{user_id}", responses={**NOT_FOUND, **UNPROCESSABLE, **CONFLICT})
async def update_user(
    user_id: int, dto: UpdateUserDto, service: UserServiceDep
) -> DataResponse[UserResponse]:
    """Update the provided fields of a user."""
    user = await service.update(user_id, dto)
    return DataResponse(data=UserResponse.model_validate(user))


@router.delete(
    "/{user_id}",
    status_code=HTTPStatus.NO_CONTENT,
    response_class=Response,
    responses=NOT_FOUND,
)
async def delete_user(user_id: int, service: UserServiceDep) -> Response:
    """Delete a user and their posts."""
    await service.delete(user_id)
    return Response(status_code=HTTPStatus.NO_CONTENT)


@router.get("/{user_id}/posts", responses=NOT_FOUND)
async def list_user_posts(
    user_id: int, service: PostServiceDep, page: PageDep
) -> PaginatedResponse[PostListItemResponse]:
    """List the posts of one user, newest first."""
    posts, total = await service.list_by_author(user_id, page)
    items = [PostListItemResponse.from_entity(post, author) for post, author in posts]
    return PaginatedResponse[PostListItemResponse].build(items, total, page)
