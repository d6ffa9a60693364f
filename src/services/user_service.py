"""Business operations on users."""

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import (
    AlreadyExistsError,
    ConstraintViolationError,
    NotFoundError,
)
from src.core.observability import add_span_attributes
from src.domain.dto import CreateUserDto, UpdateUserDto
from src.domain.pagination import PageRequest
from src.infrastructure.database.models import USERS_EMAIL_CONSTRAINT, User
from src.infrastructure.repositories import UserRepository

EMAIL_EXISTS_DETAIL = "Email already exists"


def _is_email_conflict(error: ConstraintViolationError) -> bool:
    # PostgreSQL reports the constraint name, SQLite the column
    return USERS_EMAIL_CONSTRAINT in error.detail or "users.email" in error.detail


class UserService:
    """Create, read, update and delete users.

    Email uniqueness is checked before every insert and every email change.
    The unique constraint on ``users.email`` catches the remaining race
    between the check and the write.

    Args:
        session: Session of the current unit of work.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.users = UserRepository(session)

    async def list_page(self, page: PageRequest) -> tuple[list[User], int]:
        """One page of users ordered by id, and the total number of users."""
        users = await self.users.list_page(page.offset, page.limit)
        total = await self.users.count()
        logger.info("Listed users", count=len(users), total=total, page=page.page)
        return users, total

    async def get(self, user_id: int) -> User:
        """Fetch a user by id.

        Raises:
            NotFoundError: If no user has this id.
        """
        add_span_attributes(user_id=user_id)
        user = await self.users.get_by_id(user_id)
        if user is None:
            logger.warning("User not found", user_id=user_id)
            raise NotFoundError("User", user_id)
        return user

    async def create(self, dto: CreateUserDto) -> User:
        """Create a user.

        Raises:
            AlreadyExistsError: If the email is already used.
        """
        if await self.users.email_taken(dto.email):
            logger.warning("User creation rejected: email already exists")
            raise AlreadyExistsError(EMAIL_EXISTS_DETAIL)

        try:
            user = await self.users.create(User(username=dto.username, email=dto.email))
        except ConstraintViolationError as e:
            if _is_email_conflict(e):
                raise AlreadyExistsError(EMAIL_EXISTS_DETAIL, cause=e) from e
            raise

        add_span_attributes(user_id=user.id)
        logger.info("User created", user_id=user.id)
        return user

    async def update(self, user_id: int, dto: UpdateUserDto) -> User:
        """Apply the provided fields to a user.

        Raises:
            NotFoundError: If no user has this id.
            AlreadyExistsError: If the new email belongs to another user.
        """
        user = await self.get(user_id)
        changes = dto.changes()

        if "email" in changes:
            if changes["email"] == user.email:
                del changes["email"]
            elif await self.users.email_taken(changes["email"], exclude_id=user_id):
                logger.warning(
                    "User update rejected: email already exists", user_id=user_id
                )
                raise AlreadyExistsError(EMAIL_EXISTS_DETAIL)

        if not changes:
            return user

        try:
            user = await self.users.update(user, changes)
        except ConstraintViolationError as e:
            if _is_email_conflict(e):
                raise AlreadyExistsError(EMAIL_EXISTS_DETAIL, cause=e) from e
            raise

        logger.info("User updated", user_id=user_id, fields=sorted(changes))
        return user

    async def delete(self, user_id: int) -> None:
        """Delete a user and, through the foreign key, their posts.

        Raises:
            NotFoundError: If no user has this id.
        """
        add_span_attributes(user_id=user_id)
        if not await self.users.delete(user_id):
            logger.warning("User not found for deletion", user_id=user_id)
            raise NotFoundError("User", user_id)
        logger.info("User deleted", user_id=user_id)
