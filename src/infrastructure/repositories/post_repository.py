"""Store access for posts."""

from collections.abc import Sequence
from typing import Any

from sqlalchemy import ColumnElement, UnaryExpression
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.models import Post
from src.infrastructure.database.repository import BaseRepository

# Newest first; the id breaks ties between posts created in the same instant
NEWEST_FIRST: tuple[UnaryExpression[Any], ...] = (
    Post.created_at.desc(),
    Post.id.desc(),
)


class PostRepository(BaseRepository[Post]):
    """Repository for the ``posts`` table."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Post)

    @staticmethod
    def build_filters(
        published: bool | None = None, author_id: int | None = None
    ) -> list[ColumnElement[bool]]:
        """Translate optional listing criteria into SQL conditions."""
        filters: list[ColumnElement[bool]] = []
        if published is not None:
            filters.append(Post.published.is_(published))
        if author_id is not None:
            filters.append(Post.author_id == author_id)
        return filters

    async def list_newest(
        self, offset: int, limit: int, filters: Sequence[ColumnElement[bool]] = ()
    ) -> tuple[list[Post], int]:
        """One page of posts, newest first, and the total matching count."""
        posts = await self.list_page(offset, limit, NEWEST_FIRST, filters)
        total = await self.count(filters)
        return posts, total
