"""Global exception handlers turning every failure into an error body.

Business errors raised by the services are translated with
``to_api_error``; request validation errors are split into malformed
bodies (400) and field violations (422); framework HTTP errors keep their
status. Anything else is an opaque 500.

Client errors are logged at WARNING; server errors at ERROR with the
sanitized exception context and the correlation id of the request.
"""

from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException

from src.api.constants import (
    BAD_REQUEST_LABEL,
    CONFLICT_LABEL,
    INTERNAL_ERROR_LABEL,
    NOT_FOUND_LABEL,
    VALIDATION_FAILED_LABEL,
)
from src.api.errors import (
    ApiError,
    BadRequestError,
    InternalServerError,
    StoreFailureApiError,
    ValidationFailedError,
    to_api_error,
)
from src.api.schemas.errors import ErrorResponse
from src.api.utils.responses import ORJSONResponse
from src.api.validation import collect_violations, malformed_body_detail
from src.core.context import RequestContext
from src.core.error_context import sanitize_error_context
from src.core.exceptions import ServiceError

HTTP_STATUS_LABELS = {
    HTTPStatus.BAD_REQUEST: BAD_REQUEST_LABEL,
    HTTPStatus.NOT_FOUND: NOT_FOUND_LABEL,
    HTTPStatus.CONFLICT: CONFLICT_LABEL,
    HTTPStatus.UNPROCESSABLE_ENTITY: VALIDATION_FAILED_LABEL,
    HTTPStatus.INTERNAL_SERVER_ERROR: INTERNAL_ERROR_LABEL,
}


def _request_context(request: Request) -> dict[str, object]:
    return {
        "request_method": request.method,
        "request_path": request.url.path,
        "correlation_id": RequestContext.get_correlation_id(),
    }


def render_api_error(
    request: Request, error: ApiError, source: Exception | None = None
) -> Response:
    """Log an API error and render its response.

    Args:
        request: The request being answered.
        error: The transport error to render.
        source: The exception the error was derived from, if different.

    Returns:
        Response: ORJSONResponse carrying the error body.
    """
    logged = source or error
    context = sanitize_error_context(logged, _request_context(request))

    if error.status_code >= HTTPStatus.INTERNAL_SERVER_ERROR:
        logger.opt(exception=logged).error(
            "Request failed with {}: {}",
            error.status_code,
            error.log_detail or error.label,
            status_code=error.status_code,
            **context,
        )
    else:
        logger.warning(
            "Request rejected with {}: {}",
            error.status_code,
            error.label,
            status_code=error.status_code,
            **context,
        )

    return ORJSONResponse(status_code=error.status_code, content=error.to_body())


async def service_error_handler(request: Request, exc: Exception) -> Response:
    """Translate a business error into its transport error."""
    if not isinstance(exc, ServiceError):
        raise TypeError(f"Expected ServiceError, got {type(exc).__name__}")
    return render_api_error(request, to_api_error(exc), source=exc)


async def api_error_handler(request: Request, exc: Exception) -> Response:
    """Render an ApiError raised directly by the API layer."""
    if not isinstance(exc, ApiError):
        raise TypeError(f"Expected ApiError, got {type(exc).__name__}")
    return render_api_error(request, exc)


async def validation_error_handler(request: Request, exc: Exception) -> Response:
    """Answer 400 for malformed bodies and 422 with violations otherwise."""
    if not isinstance(exc, RequestValidationError):
        raise TypeError(f"Expected RequestValidationError, got {type(exc).__name__}")

    errors = exc.errors()
    detail = malformed_body_detail(errors)
    error: ApiError
    if detail is not None:
        error = BadRequestError(detail)
    else:
        error = ValidationFailedError(collect_violations(errors))
    return render_api_error(request, error)


async def http_exception_handler(request: Request, exc: Exception) -> Response:
    """Render framework HTTP errors (unknown route, wrong method) with a label."""
    if not isinstance(exc, HTTPException):
        raise TypeError(f"Expected HTTPException, got {type(exc).__name__}")

    label = HTTP_STATUS_LABELS.get(exc.status_code)
    if label is None:
        label = HTTPStatus(exc.status_code).phrase
    logger.warning(
        "HTTP exception {}: {}",
        exc.status_code,
        exc.detail,
        status_code=exc.status_code,
        **_request_context(request),
    )
    return ORJSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=label).model_dump(exclude_none=True),
        headers=exc.headers,
    )


async def store_error_handler(request: Request, exc: Exception) -> Response:
    """Answer database errors raised outside a repository with a 500."""
    return render_api_error(
        request, StoreFailureApiError(f"Unhandled {type(exc).__name__}"), source=exc
    )


async def generic_exception_handler(request: Request, exc: Exception) -> Response:
    """Answer any unhandled exception with an opaque 500."""
    return render_api_error(
        request, InternalServerError(f"Unhandled {type(exc).__name__}"), source=exc
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Exception handlers registered")
