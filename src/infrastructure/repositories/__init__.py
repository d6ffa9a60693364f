"""Repositories for the blog entities."""

from src.infrastructure.repositories.post_repository import PostRepository
from src.infrastructure.repositories.user_repository import UserRepository

__all__ = ["PostRepository", "UserRepository"]
