"""Application factory and lifespan of the blog API.

Startup refuses to serve when the database does not answer, then creates
the ``users`` and ``posts`` tables if ``database_config.create_schema`` is
on. Shutdown disposes the engine.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from src.api.middleware.error_handler import register_exception_handlers
from src.api.middleware.request_context import RequestContextMiddleware
from src.api.middleware.request_logging import RequestLoggingMiddleware
from src.api.middleware.security_headers import SecurityHeadersMiddleware
from src.api.routes import health_router, posts_router, users_router
from src.api.utils.responses import ORJSONResponse
from src.core.config import Settings, get_settings
from src.core.logging import setup_logging
from src.core.observability import instrument_app, setup_tracing
from src.infrastructure.database.session import (
    check_database_connection,
    close_database,
    create_schema,
)


async def _prepare_database(settings: Settings) -> None:
    reachable, reason = await check_database_connection()
    if not reachable:
        logger.error("Database unreachable at startup: {}", reason)
        msg = f"Cannot start without a database: {reason}"
        raise RuntimeError(msg)
    logger.info("Database reachable")

    if settings.database_config.create_schema:
        await create_schema()


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncGenerator[None]:
    """Prepare the database before serving and release it afterwards.

    Raises:
        RuntimeError: If the database cannot be reached on startup.
    """
    await _prepare_database(get_settings())
    logger.info("{} v{} ready", application.title, application.version)

    yield

    await close_database()
    logger.info("{} stopped", application.title)


def _add_middleware(application: FastAPI, settings: Settings) -> None:
    # Added innermost first: security headers end up wrapping everything
    application.add_middleware(RequestLoggingMiddleware, log_config=settings.log_config)
    application.add_middleware(RequestContextMiddleware)
    application.add_middleware(SecurityHeadersMiddleware)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the blog API application.

    Args:
        settings: Settings to build from; ``get_settings()`` when omitted.

    Returns:
        FastAPI: The application with handlers, middleware, routers and
        tracing in place.
    """
    settings = settings or get_settings()

    setup_logging(settings)
    setup_tracing(settings)

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        docs_url=settings.docs_url,
        redoc_url=settings.redoc_url,
        openapi_url=settings.openapi_url,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    register_exception_handlers(application)
    _add_middleware(application, settings)
    for router in (health_router, users_router, posts_router):
        application.include_router(router)

    instrument_app(application, settings)
    return application


app = create_app()
