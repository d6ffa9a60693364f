"""Store access for users."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.models import User
from src.infrastructure.database.repository import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for the ``users`` table."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, User)

    async def email_taken(self, email: str, exclude_id: int | None = None) -> bool:
        """Whether another user already uses ``email``.

        Args:
            email: The address to look for.
            exclude_id: A user id to ignore, used when updating that user.

        Returns:
            bool: True if a different user holds the address.
        """
        conditions = [User.email == email]
        if exclude_id is not None:
            conditions.append(User.id != exclude_id)
        return await self.exists(*conditions)
