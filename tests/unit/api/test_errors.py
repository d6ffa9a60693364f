"""Unit tests for the transport error tier in src/api/errors.py."""

from http import HTTPStatus

import pytest
from pytest_check import check

from src.api.errors import (
    ApiError,
    BadRequestError,
    ConflictError,
    InternalServerError,
    NotFoundApiError,
    StoreFailureApiError,
    ValidationFailedError,
    to_api_error,
)
from src.api.schemas.errors import Violation
from src.core.exceptions import (
    AlreadyExistsError,
    ConstraintViolationError,
    ErrorCode,
    NotFoundError,
    ServiceError,
    StoreFailureError,
)


@pytest.mark.unit
class TestApiErrorBodies:
    """Test status codes and rendered bodies."""

    @pytest.mark.parametrize(
        ("error", "status", "body"),
        [
            (NotFoundApiError(), HTTPStatus.NOT_FOUND, {"error": "Resource not found"}),
            (
                BadRequestError("Expecting value"),
                HTTPStatus.BAD_REQUEST,
                {"error": "Bad request", "details": "Expecting value"},
            ),
            (
                ConflictError("Email already exists"),
                HTTPStatus.CONFLICT,
                {"error": "Conflict", "details": "Email already exists"},
            ),
            (
                InternalServerError("pool exhausted"),
                HTTPStatus.INTERNAL_SERVER_ERROR,
                {"error": "Internal server error"},
            ),
            (
                StoreFailureApiError("connection reset"),
                HTTPStatus.INTERNAL_SERVER_ERROR,
                {"error": "Database error"},
            ),
        ],
    )
    def test_body(self, error: ApiError, status: int, body: dict[str, str]) -> None:
        """Test that each kind renders its label and, if public, its detail."""
        with check:
            assert error.status_code == status
        with check:
            assert error.to_body() == body

    def test_validation_failed_body(self) -> None:
        """Test the violations body."""
        error = ValidationFailedError(
            [Violation(field="metadata.tags.0.name", messages=["Too long"])]
        )

        assert error.status_code == HTTPStatus.UNPROCESSABLE_ENTITY
        assert error.to_body() == {
            "error": "Validation failed",
            "violations": [{"field": "metadata.tags.0.name", "messages": ["Too long"]}],
        }

    def test_internal_detail_kept_for_logs(self) -> None:
        """Test that suppressed details stay available to the server log."""
        error = InternalServerError("pool exhausted")

        assert error.log_detail == "pool exhausted"
        assert error.client_detail is None
        assert str(error) == "pool exhausted"


@pytest.mark.unit
class TestToApiError:
    """Test the business to transport mapping."""

    def test_not_found(self) -> None:
        """Test NotFound maps to NotFound."""
        assert isinstance(to_api_error(NotFoundError("User", 1)), NotFoundApiError)

    def test_already_exists_keeps_detail(self) -> None:
        """Test AlreadyExists maps to Conflict with its detail."""
        error = to_api_error(AlreadyExistsError("Email already exists"))

        assert isinstance(error, ConflictError)
        assert error.to_body()["details"] == "Email already exists"

    @pytest.mark.parametrize(
        "source",
        [
            StoreFailureError("deadlock detected"),
            ConstraintViolationError("FOREIGN KEY constraint failed"),
        ],
    )
    def test_store_failure_suppresses_detail(self, source: StoreFailureError) -> None:
        """Test StoreFailure maps to an internal error without public detail."""
        error = to_api_error(source)

        assert isinstance(error, InternalServerError)
        assert error.log_detail == source.detail
        assert error.to_body() == {"error": "Internal server error"}

    def test_unknown_service_error(self) -> None:
        """Test that the mapping is total."""
        error = to_api_error(ServiceError(ErrorCode.STORE_FAILURE, "odd"))

        assert isinstance(error, InternalServerError)
