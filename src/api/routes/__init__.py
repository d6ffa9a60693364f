"""HTTP routers."""

from src.api.routes.health import router as health_router
from src.api.routes.posts import router as posts_router
from src.api.routes.users import router as users_router

__all__ = ["health_router", "posts_router", "users_router"]
