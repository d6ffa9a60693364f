"""Transport-tier errors and their mapping from business errors.

Each ``ApiError`` knows its HTTP status, the label that goes into the
``error`` field of the body and, for some kinds, a client-visible detail.
Internal failures keep their detail for the server log only.

``to_api_error`` is the single, total translation from the business tier
(``src.core.exceptions``) to this tier.
"""

from http import HTTPStatus
from typing import Any

from src.api.constants import (
    BAD_REQUEST_LABEL,
    CONFLICT_LABEL,
    DATABASE_ERROR_LABEL,
    INTERNAL_ERROR_LABEL,
    NOT_FOUND_LABEL,
    VALIDATION_FAILED_LABEL,
)
from src.api.schemas.errors import ErrorResponse, ValidationErrorResponse, Violation
from src.core.exceptions import (
    AlreadyExistsError,
    NotFoundError,
    ServiceError,
    StoreFailureError,
)


class ApiError(Exception):
    """Base class for errors rendered as an HTTP error response.

    Args:
        log_detail: Detail for the server log. Never sent to the client
            unless the subclass exposes it.
    """

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR
    label: str = INTERNAL_ERROR_LABEL

    def __init__(self, log_detail: str | None = None) -> None:
        super().__init__(log_detail or self.label)
        self.log_detail = log_detail

    @property
    def client_detail(self) -> str | None:
        """Detail included in the response body, if any."""
        return None

    def to_body(self) -> dict[str, Any]:
        """Render the JSON body of the response."""
        return ErrorResponse(error=self.label, details=self.client_detail).model_dump(
            exclude_none=True
        )


class NotFoundApiError(ApiError):
    """The addressed resource does not exist."""

    status_code = HTTPStatus.NOT_FOUND
    label = NOT_FOUND_LABEL


class BadRequestError(ApiError):
    """The request could not be parsed."""

    status_code = HTTPStatus.BAD_REQUEST
    label = BAD_REQUEST_LABEL

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail

    @property
    def client_detail(self) -> str | None:
        """The parser message."""
        return self.detail


class ValidationFailedError(ApiError):
    """One or more fields violate their rules.

    Args:
        violations: Every violation found, grouped by field.
    """

    status_code = HTTPStatus.UNPROCESSABLE_ENTITY
    label = VALIDATION_FAILED_LABEL

    def __init__(self, violations: list[Violation]) -> None:
        super().__init__(f"{len(violations)} invalid field(s)")
        self.violations = violations

    def to_body(self) -> dict[str, Any]:
        """Render the label and the list of violations."""
        return ValidationErrorResponse(
            error=self.label, violations=self.violations
        ).model_dump()


class ConflictError(ApiError):
    """The request conflicts with existing data."""

    status_code = HTTPStatus.CONFLICT
    label = CONFLICT_LABEL

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail

    @property
    def client_detail(self) -> str | None:
        """Description of the conflict."""
        return self.detail


class InternalServerError(ApiError):
    """An unexpected failure; the detail is logged, never returned."""


class StoreFailureApiError(ApiError):
    """A database failure reported as such; the detail is logged only."""

    label = DATABASE_ERROR_LABEL


def to_api_error(error: ServiceError) -> ApiError:
    """Translate a business error into its transport error.

    Args:
        error: Error raised by an entity service.

    Returns:
        ApiError: NotFound for missing entities, Conflict (detail kept) for
        uniqueness failures and InternalServerError for everything else.
    """
    match error:
        case NotFoundError():
            return NotFoundApiError(error.message)
        case AlreadyExistsError():
            return ConflictError(error.detail)
        case StoreFailureError():
            return InternalServerError(error.detail)
        case _:
            return InternalServerError(error.message)
