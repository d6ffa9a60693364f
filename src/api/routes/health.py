"""Service endpoints: welcome message, health check and build information."""

from typing import Annotated, Any, Literal

from fastapi import APIRouter, Depends
from loguru import logger
from pydantic import BaseModel

from src.core.config import Settings, get_settings
from src.infrastructure.database.session import check_database_connection

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: Literal["healthy", "degraded"]
    database: bool


@router.get("/")
async def root(
    settings: Annotated[Settings, Depends(get_settings)],
) -> dict[str, str]:
    """Welcome message."""
    return {"message": f"Welcome to {settings.app_name}"}


@router.get("/health")
async def health() -> HealthResponse:
    """Report whether the service can reach its database.

    The endpoint always answers 200; an unreachable database is reported as
    ``degraded`` so that load balancers keep routing while it recovers.
    """
    is_healthy, error_msg = await check_database_connection()
    if not is_healthy:
        logger.warning("Database health check failed: {}", error_msg)
    status = "healthy" if is_healthy else "degraded"
    return HealthResponse(status=status, database=is_healthy)


@router.get("/info")
async def info(
    settings: Annotated[Settings, Depends(get_settings)],
) -> dict[str, Any]:
    """Application name, version and environment."""
    return {
        "app_name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "debug": settings.debug,
    }
