"""Test data builders.

A module-wide sequence keeps usernames and emails unique across a test run,
so tests never collide on the email unique constraint by accident.
"""

import itertools
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.metadata import PostMetadata, serialize_metadata
from src.infrastructure.database.models import Post, User

_sequence = itertools.count(1)


def next_id() -> int:
    """Next value of the shared sequence."""
    return next(_sequence)


def user_payload(**overrides: Any) -> dict[str, Any]:
    """Body of a valid user creation request."""
    n = next_id()
    payload: dict[str, Any] = {"username": f"user_{n}", "email": f"user{n}@example.com"}
    payload.update(overrides)
    return payload


def post_payload(author_id: int, /, **overrides: Any) -> dict[str, Any]:
    """Body of a valid post creation request."""
    n = next_id()
    payload: dict[str, Any] = {
        "title": f"Post number {n}",
        "content": f"Content of post number {n}, long enough to be valid.",
        "author_id": author_id,
    }
    payload.update(overrides)
    return payload


async def create_user(session: AsyncSession, **overrides: Any) -> User:
    """Insert and commit a user directly through the session."""
    user = User(**user_payload(**overrides))
    session.add(user)
    await session.commit()
    return user


async def create_post(
    session: AsyncSession,
    author: User,
    metadata: PostMetadata | None = None,
    **overrides: Any,
) -> Post:
    """Insert and commit a post directly through the session."""
    fields = post_payload(author.id, **overrides)
    post = Post(**fields, metadata_=serialize_metadata(metadata or PostMetadata()))
    session.add(post)
    await session.commit()
    return post
