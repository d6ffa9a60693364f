"""Redaction of sensitive values before they reach logs.

Error handlers and the store adapter pass exception attributes, request
metadata and SQL parameters through these helpers. Only the logged copy is
redacted; the original objects are never mutated.

Field names are matched against a built-in pattern plus the configured
``log_config.sensitive_fields``. The pattern is anchored on word parts so
that domain fields such as ``author_id`` are not mistaken for auth data.
"""

from __future__ import annotations

import re
from functools import lru_cache
from re import Pattern
from typing import Any, Final

from src.core.config import get_settings
from src.core.constants import REDACTED

type SanitizableValue = (
    str | int | float | bool | None | dict[str, Any] | list[Any] | tuple[Any, ...]
)

SENSITIVE_HEADERS: Final[frozenset[str]] = frozenset(
    {
        "authorization",
        "cookie",
        "set-cookie",
        "proxy-authorization",
        "x-api-key",
        "x-auth-token",
        "x-csrf-token",
    }
)

DEFAULT_SENSITIVE_PATTERN: Final[Pattern[str]] = re.compile(
    r"(^|[_-])(password|passwd|pwd|secret|token|api[_-]?key|apikey|auth|"
    r"authorization|credential|private[_-]?key|access[_-]?key|session[_-]?id|"
    r"card[_-]?number|cvv|connection[_-]?string)s?($|[_-])",
    re.IGNORECASE,
)

MAX_DEPTH: Final[int] = 10


@lru_cache(maxsize=1)
def _configured_sensitive_fields() -> tuple[str, ...]:
    return tuple(f.lower() for f in get_settings().log_config.sensitive_fields)


def is_sensitive_field(field_name: str) -> bool:
    """Check if a field name indicates sensitive data.

    Args:
        field_name: The field name to check.

    Returns:
        bool: True if the field matches the default pattern or a configured name.
    """
    if DEFAULT_SENSITIVE_PATTERN.search(field_name):
        return True
    return field_name.lower() in _configured_sensitive_fields()


def is_sensitive_header(header_name: str) -> bool:
    """Check if an HTTP header name is sensitive (case-insensitive)."""
    return header_name.lower() in SENSITIVE_HEADERS


def sanitize_value(
    value: SanitizableValue, field_name: str = "", depth: int = 0
) -> SanitizableValue:
    """Redact a value if its field name is sensitive, recursing into containers.

    Args:
        value: The value to potentially sanitize.
        field_name: Name of the field holding the value.
        depth: Current recursion depth.

    Returns:
        SanitizableValue: The sanitized copy.
    """
    if depth > MAX_DEPTH:
        return REDACTED
    if field_name and is_sensitive_field(field_name):
        return REDACTED
    if isinstance(value, dict):
        return {k: sanitize_value(v, k, depth + 1) for k, v in value.items()}
    if isinstance(value, list):
        return [sanitize_value(item, "", depth + 1) for item in value]
    if isinstance(value, tuple):
        return tuple(sanitize_value(item, "", depth + 1) for item in value)
    return value


def sanitize_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``data`` with sensitive fields redacted."""
    return {key: sanitize_value(value, key) for key, value in data.items()}


def sanitize_headers(headers: dict[str, str]) -> dict[str, str]:
    """Return a copy of ``headers`` with sensitive headers redacted."""
    return {k: REDACTED if is_sensitive_header(k) else v for k, v in headers.items()}


def sanitize_error_context(
    error: Exception, context: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Build a log-safe description of an exception.

    Public attributes of the exception (for service errors: code, severity,
    context, detail) are included under ``error_attributes``.

    Args:
        error: The exception to describe.
        context: Additional context to include.

    Returns:
        dict[str, Any]: Sanitized context safe for logging.
    """
    error_context: dict[str, Any] = {
        "error_type": type(error).__name__,
        "error_message": str(error),
    }
    if context:
        error_context.update(sanitize_dict(context))

    error_attrs = {
        k: v
        for k, v in getattr(error, "__dict__", {}).items()
        if not k.startswith("_") and k != "cause"
    }
    if error_attrs:
        error_context["error_attributes"] = sanitize_dict(error_attrs)
    return error_context


def sanitize_sql_params(params: object) -> object:
    """Sanitize SQL statement parameters for logging.

    Named parameters are redacted by key. Positional parameters carry no
    names and are returned unchanged; any other shape is redacted entirely.

    Args:
        params: Parameters as handed to the DBAPI cursor.

    Returns:
        object: Sanitized parameters in the same shape as the input.
    """
    if params is None:
        return None
    if isinstance(params, dict):
        return sanitize_dict(params)
    if isinstance(params, (list, tuple)):
        return params
    return REDACTED
