"""Business operations on posts.

Every read returns the post together with its author, looked up separately
by ``author_id``. The metadata document is converted to and from its JSON
column form here, so repositories only ever see plain JSON values.
"""

from typing import NamedTuple

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import NotFoundError
from src.core.observability import add_span_attributes, trace_operation
from src.domain.dto import CreatePostDto, UpdatePostDto
from src.domain.metadata import metadata_from_dto, serialize_metadata
from src.domain.pagination import PageRequest
from src.infrastructure.database.base import utc_now
from src.infrastructure.database.models import Post, User
from src.infrastructure.repositories import PostRepository, UserRepository


class AuthoredPost(NamedTuple):
    """A post and the user who wrote it."""

    post: Post
    author: User


class PostService:
    """Create, read, update and delete posts.

    Args:
        session: Session of the current unit of work.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.posts = PostRepository(session)
        self.users = UserRepository(session)

    async def _author_of(self, post: Post) -> User:
        author = await self.users.get_by_id(post.author_id)
        if author is None:
            logger.warning(
                "Author not found", post_id=post.id, author_id=post.author_id
            )
            raise NotFoundError("User", post.author_id)
        return author

    async def _with_authors(self, posts: list[Post]) -> list[AuthoredPost]:
        return [AuthoredPost(post, await self._author_of(post)) for post in posts]

    async def list_page(
        self, page: PageRequest, published: bool | None = None
    ) -> tuple[list[AuthoredPost], int]:
        """One page of posts, newest first, and the total matching count.

        Args:
            page: Requested page.
            published: Restrict to published (True) or draft (False) posts.
        """
        filters = self.posts.build_filters(published=published)
        posts, total = await self.posts.list_newest(page.offset, page.limit, filters)
        items = await self._with_authors(posts)
        logger.info(
            "Listed posts",
            count=len(items),
            total=total,
            page=page.page,
            published=published,
        )
        return items, total

    async def list_by_author(
        self, author_id: int, page: PageRequest
    ) -> tuple[list[AuthoredPost], int]:
        """One page of the posts of one author, newest first.

        Raises:
            NotFoundError: If the author does not exist.
        """
        add_span_attributes(author_id=author_id)
        author = await self.users.get_by_id(author_id)
        if author is None:
            logger.warning("Author not found", author_id=author_id)
            raise NotFoundError("User", author_id)

        filters = self.posts.build_filters(author_id=author_id)
        posts, total = await self.posts.list_newest(page.offset, page.limit, filters)
        logger.info(
            "Listed posts by author",
            author_id=author_id,
            count=len(posts),
            total=total,
        )
        return [AuthoredPost(post, author) for post in posts], total

    async def get(self, post_id: int) -> AuthoredPost:
        """Fetch a post and its author.

        Raises:
            NotFoundError: If no post has this id.
        """
        add_span_attributes(post_id=post_id)
        post = await self.posts.get_by_id(post_id)
        if post is None:
            logger.warning("Post not found", post_id=post_id)
            raise NotFoundError("Post", post_id)
        return AuthoredPost(post, await self._author_of(post))

    async def create(self, dto: CreatePostDto) -> AuthoredPost:
        """Create a post for an existing author.

        Raises:
            NotFoundError: If the author does not exist. Nothing is written.
        """
        with trace_operation("post.create", author_id=dto.author_id):
            author = await self.users.get_by_id(dto.author_id)
            if author is None:
                logger.warning(
                    "Post creation rejected: author not found",
                    author_id=dto.author_id,
                )
                raise NotFoundError("User", dto.author_id)

            post = await self.posts.create(
                Post(
                    title=dto.title,
                    content=dto.content,
                    author_id=dto.author_id,
                    metadata_=serialize_metadata(metadata_from_dto(dto.metadata)),
                    published=bool(dto.published),
                )
            )

        logger.info("Post created", post_id=post.id, author_id=author.id)
        return AuthoredPost(post, author)

    async def update(self, post_id: int, dto: UpdatePostDto) -> AuthoredPost:
        """Apply the provided fields to a post and stamp ``updated_at``.

        A provided metadata document replaces the stored one wholesale.

        Raises:
            NotFoundError: If no post has this id.
        """
        post = await self.posts.get_by_id(post_id)
        if post is None:
            logger.warning("Post not found for update", post_id=post_id)
            raise NotFoundError("Post", post_id)

        changes = dto.changes()
        if "metadata" in changes:
            changes["metadata_"] = serialize_metadata(
                metadata_from_dto(changes.pop("metadata"))
            )
        changes["updated_at"] = utc_now()

        post = await self.posts.update(post, changes)
        logger.info("Post updated", post_id=post_id, fields=sorted(changes))
        return AuthoredPost(post, await self._author_of(post))

    async def delete(self, post_id: int) -> None:
        """Delete a post.

        Raises:
            NotFoundError: If no post has this id.
        """
        add_span_attributes(post_id=post_id)
        if not await self.posts.delete(post_id):
            logger.warning("Post not found for deletion", post_id=post_id)
            raise NotFoundError("Post", post_id)
        logger.info("Post deleted", post_id=post_id)
