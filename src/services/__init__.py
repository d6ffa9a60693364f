"""Entity services: the business operations behind the HTTP endpoints."""

from src.services.post_service import AuthoredPost, PostService
from src.services.user_service import UserService

__all__ = ["AuthoredPost", "PostService", "UserService"]
