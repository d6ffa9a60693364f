"""Turning Pydantic errors into client-facing violations.

Request bodies fail in two distinct ways. A body that does not have the
expected shape is malformed and answered with 400: it is not JSON, not an
object, lacks a required field or holds a value of the wrong JSON type. A
well-formed object whose values break rules is answered with 422 and the
complete list of violations, one entry per field path in the order Pydantic
reported them.
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from pydantic import BaseModel, ValidationError

from src.api.errors import BadRequestError, ValidationFailedError
from src.api.schemas.errors import Violation

# Location prefixes FastAPI puts in front of the field path
REQUEST_LOCATIONS = frozenset({"body", "query", "path", "header", "cookie"})

JSON_INVALID = "json_invalid"
NOT_AN_OBJECT_DETAIL = "Request body must be a JSON object"

# Pydantic error types meaning the value could not be read as the declared
# type at all, e.g. string_type, bool_type, int_parsing, model_type
SHAPE_ERROR_TYPES = frozenset({"missing"})
SHAPE_ERROR_SUFFIXES = ("_type", "_parsing")


def field_path(loc: Sequence[str | int]) -> str:
    """Render an error location as a dotted path.

    Args:
        loc: Location tuple from a Pydantic or FastAPI error.

    Returns:
        str: e.g. ``metadata.tags.0.name``; ``body`` for the root.
    """
    parts = list(loc)
    if len(parts) > 1 and parts[0] in REQUEST_LOCATIONS:
        parts = parts[1:]
    return ".".join(str(part) for part in parts)


def is_shape_error(error_type: str) -> bool:
    """Whether a Pydantic error type means the value has the wrong shape."""
    return error_type in SHAPE_ERROR_TYPES or error_type.endswith(
        SHAPE_ERROR_SUFFIXES
    )


def shape_error_detail(errors: Iterable[Mapping[str, Any]]) -> str | None:
    """Parser message for the first shape error, if any.

    Args:
        errors: Errors reported for one payload.

    Returns:
        str | None: e.g. ``title: Input should be a valid string``, or None
        when every error is a rule violation.
    """
    for error in errors:
        if is_shape_error(str(error.get("type", ""))):
            return f"{field_path(error['loc'])}: {error['msg']}"
    return None


def malformed_body_detail(errors: Iterable[Mapping[str, Any]]) -> str | None:
    """Return a parser message if the errors describe a malformed body.

    Only errors located in the body count; a bad path or query parameter is
    a violation.

    Args:
        errors: Errors reported for one request.

    Returns:
        str | None: The message for a 400 response, or None when the body
        had the expected shape and only field rules failed.
    """
    body_errors = [e for e in errors if tuple(e.get("loc", ()))[:1] == ("body",)]
    for error in body_errors:
        if error.get("type") == JSON_INVALID:
            reason = (error.get("ctx") or {}).get("error")
            return f"{error['msg']}: {reason}" if reason else str(error["msg"])
        if tuple(error["loc"]) == ("body",):
            if error.get("type") == "missing":
                return "Request body is required"
            return NOT_AN_OBJECT_DETAIL
    return shape_error_detail(body_errors)


def collect_violations(errors: Iterable[Mapping[str, Any]]) -> list[Violation]:
    """Group error messages by field path, keeping first-seen order.

    Args:
        errors: Errors as returned by ``ValidationError.errors()``.

    Returns:
        list[Violation]: One entry per distinct field path.
    """
    grouped: dict[str, list[str]] = {}
    for error in errors:
        grouped.setdefault(field_path(error["loc"]), []).append(str(error["msg"]))
    return [Violation(field=path, messages=msgs) for path, msgs in grouped.items()]


def validate_payload[M: BaseModel](model: type[M], data: object) -> M:
    """Validate decoded JSON against a DTO outside of a FastAPI route.

    Args:
        model: The DTO class.
        data: Decoded JSON value.

    Returns:
        M: The validated DTO.

    Raises:
        BadRequestError: If ``data`` is not a JSON object or does not have
            the shape of the DTO.
        ValidationFailedError: If any field anywhere in the graph is invalid.
    """
    if not isinstance(data, dict):
        raise BadRequestError(NOT_AN_OBJECT_DETAIL)
    try:
        return model.model_validate(data)
    except ValidationError as e:
        errors = e.errors()
        detail = shape_error_detail(errors)
        if detail is not None:
            raise BadRequestError(detail) from e
        raise ValidationFailedError(collect_violations(errors)) from e
