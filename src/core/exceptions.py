"""Business-tier exception hierarchy raised by the entity services.

These exceptions describe what went wrong in business terms only. They carry
no HTTP status codes and no serialization logic; translating them into a
transport response is the job of ``src.api.errors.to_api_error``.

Key components:
- **ErrorCode enum**: Stable identifiers for programmatic handling and logs
- **Severity enum**: Error classification for log levels and alerting
- **ServiceError**: Base exception with code, severity and structured context
- **NotFoundError / AlreadyExistsError / StoreFailureError**: The three
  outcomes an entity service can fail with
"""

from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes for business-level failures."""

    NOT_FOUND = "NOT_FOUND"
    """The requested entity does not exist."""

    ALREADY_EXISTS = "ALREADY_EXISTS"
    """A uniqueness rule rejected the operation."""

    STORE_FAILURE = "STORE_FAILURE"
    """The row store failed in a way the service could not classify."""


class Severity(Enum):
    """Severity levels used to pick log levels and alerting behaviour."""

    LOW = "LOW"
    """Expected during normal operation (bad ids, duplicate emails)."""

    MEDIUM = "MEDIUM"
    """Degraded behaviour that does not compromise data."""

    HIGH = "HIGH"
    """Failures of infrastructure the service depends on."""


class ServiceError(Exception):
    """Base exception for every failure an entity service can report.

    Args:
        error_code: Identifier of the failure kind.
        message: Human-readable description, safe to show to callers unless
            the transport layer decides otherwise.
        severity: Severity of the failure (defaults to LOW).
        context: Additional structured information for logging.
        cause: The original exception, chained as ``__cause__``.
    """

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        severity: Severity = Severity.LOW,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.error_code = error_code.value
        self.message = message
        self.severity = severity
        self.context = context or {}
        self.cause = cause

        super().__init__(message)
        if cause:
            self.__cause__ = cause

    @property
    def is_expected(self) -> bool:
        """Whether this error is part of normal operation.

        Expected errors are logged at WARNING level and never alert.

        Returns:
            bool: True for LOW and MEDIUM severity.
        """
        return self.severity in (Severity.LOW, Severity.MEDIUM)

    def __str__(self) -> str:
        """Return a string representation of the exception.

        Returns:
            str: The error code followed by the message.
        """
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        """Return a detailed representation of the exception.

        Returns:
            str: Class name, error code, message, severity and context.
        """
        class_name = self.__class__.__name__
        context_str = f", context={self.context}" if self.context else ""
        return (
            f"{class_name}(error_code='{self.error_code}', "
            f"message='{self.message}', severity={self.severity.value}{context_str})"
        )


class NotFoundError(ServiceError):
    """Raised when an entity looked up by id does not exist.

    Args:
        entity: Name of the entity kind (e.g. "User").
        entity_id: The id that failed to resolve.
    """

    def __init__(self, entity: str, entity_id: int | None = None) -> None:
        context: dict[str, Any] = {"entity": entity}
        if entity_id is not None:
            context["entity_id"] = entity_id
        super().__init__(ErrorCode.NOT_FOUND, f"{entity} not found", context=context)
        self.entity = entity
        self.entity_id = entity_id


class AlreadyExistsError(ServiceError):
    """Raised when creating or updating would break a uniqueness rule.

    Args:
        detail: Description of the conflicting value, returned to the caller.
        context: Additional structured information for logging.
        cause: The store exception that revealed the conflict, if any.
    """

    def __init__(
        self,
        detail: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(ErrorCode.ALREADY_EXISTS, detail, context=context, cause=cause)
        self.detail = detail


class StoreFailureError(ServiceError):
    """Raised when the row store fails in an unanticipated way.

    The detail is meant for server-side logs only.

    Args:
        detail: Description of the failure.
        cause: The original store exception.
    """

    def __init__(self, detail: str, cause: Exception | None = None) -> None:
        super().__init__(
            ErrorCode.STORE_FAILURE, detail, severity=Severity.HIGH, cause=cause
        )
        self.detail = detail


class ConstraintViolationError(StoreFailureError):
    """Store failure caused by an integrity constraint (unique, foreign key).

    Services may reclassify it into a business error; when they do not, it is
    handled like any other store failure.
    """
