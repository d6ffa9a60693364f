"""Unit tests for src/core/error_context.py module."""

from typing import Any

import pytest
from pytest_check import check
from pytest_mock import MockType

from src.core.constants import REDACTED
from src.core.error_context import (
    MAX_DEPTH,
    is_sensitive_field,
    is_sensitive_header,
    sanitize_dict,
    sanitize_error_context,
    sanitize_headers,
    sanitize_sql_params,
    sanitize_value,
)
from src.core.exceptions import AlreadyExistsError


@pytest.mark.unit
class TestIsSensitiveField:
    """Test field name classification."""

    @pytest.mark.parametrize(
        "field",
        [
            "password",
            "user_password",
            "PASSWORD",
            "api_key",
            "apiKey",
            "x-api-key",
            "access_token",
            "refresh_token",
            "client_secret",
            "credentials",
            "session_id",
            "card_number",
        ],
    )
    def test_sensitive(self, field: str) -> None:
        """Test names that must be redacted."""
        assert is_sensitive_field(field)

    @pytest.mark.parametrize(
        "field",
        ["author_id", "username", "email", "title", "tokenizer", "authors", "id"],
    )
    def test_not_sensitive(self, field: str) -> None:
        """Test domain names that must be kept."""
        assert not is_sensitive_field(field)

    def test_configured_fields(self, mock_get_settings: MockType) -> None:
        """Test that configured names are matched case-insensitively."""
        with check:
            assert is_sensitive_field("custom_secret")
        with check:
            assert is_sensitive_field("signature")
        with check:
            assert not is_sensitive_field("theme")
        mock_get_settings.assert_called_once()


@pytest.mark.unit
class TestSanitizeValue:
    """Test recursive sanitization."""

    def test_nested_structures(self, sample_sensitive_data: dict[str, Any]) -> None:
        """Test that sensitive keys are redacted at every depth."""
        result = sanitize_dict(sample_sensitive_data)

        with check:
            assert result["password"] == REDACTED
        with check:
            assert result["username"] == "jane_doe"
        with check:
            assert result["author_id"] == 7
        with check:
            assert result["profile"]["api_key"] == REDACTED
        with check:
            assert result["profile"]["email"] == "jane@example.com"
        with check:
            assert result["profile"]["settings"]["private_key"] == REDACTED
        with check:
            assert result["items"][0]["token"] == REDACTED
        with check:
            assert result["items"][1]["title"] == "Hello"
        with check:
            assert result["pair"] == ("public", {"secret": REDACTED})

    def test_original_not_mutated(self, sample_sensitive_data: dict[str, Any]) -> None:
        """Test that sanitization works on a copy."""
        sanitize_dict(sample_sensitive_data)

        assert sample_sensitive_data["password"] == "secret123"
        assert sample_sensitive_data["profile"]["api_key"] == "sk-1234567890"

    def test_depth_limit(self) -> None:
        """Test that structures nested beyond the limit are redacted."""
        data: dict[str, Any] = {"value": "leaf"}
        for _ in range(MAX_DEPTH + 2):
            data = {"child": data}

        result = sanitize_value(data)

        node: Any = result
        while isinstance(node, dict):
            node = node["child"]
        assert node == REDACTED


@pytest.mark.unit
class TestSanitizeHeaders:
    """Test header sanitization."""

    def test_sensitive_headers_redacted(self) -> None:
        """Test that auth headers are redacted and others kept."""
        headers = {
            "Authorization": "Bearer abc",
            "Cookie": "session=1",
            "Content-Type": "application/json",
            "X-Correlation-ID": "abc-123",
        }

        result = sanitize_headers(headers)

        assert result == {
            "Authorization": REDACTED,
            "Cookie": REDACTED,
            "Content-Type": "application/json",
            "X-Correlation-ID": "abc-123",
        }

    def test_is_sensitive_header_case_insensitive(self) -> None:
        """Test header matching ignores case."""
        assert is_sensitive_header("X-API-KEY")
        assert not is_sensitive_header("Accept")


@pytest.mark.unit
class TestSanitizeErrorContext:
    """Test the log-safe description of exceptions."""

    def test_plain_exception(self) -> None:
        """Test type and message of a plain exception."""
        result = sanitize_error_context(ValueError("bad value"))

        assert result == {"error_type": "ValueError", "error_message": "bad value"}

    def test_service_error_attributes(self) -> None:
        """Test that public attributes are included and the cause excluded."""
        error = AlreadyExistsError(
            "Email already exists",
            context={"password": "hunter2"},
            cause=RuntimeError("unique"),
        )

        result = sanitize_error_context(error, {"request_path": "/users"})

        attrs = result["error_attributes"]
        with check:
            assert result["request_path"] == "/users"
        with check:
            assert attrs["detail"] == "Email already exists"
        with check:
            assert attrs["context"] == {"password": REDACTED}
        with check:
            assert "cause" not in attrs


@pytest.mark.unit
class TestSanitizeSqlParams:
    """Test SQL parameter sanitization."""

    def test_named_parameters(self) -> None:
        """Test that named parameters are redacted by key."""
        params = {"email": "a@example.com", "password": "x"}

        assert sanitize_sql_params(params) == {
            "email": "a@example.com",
            "password": REDACTED,
        }

    def test_positional_parameters_unchanged(self) -> None:
        """Test that positional parameters pass through."""
        params = ("a@example.com", 3)

        assert sanitize_sql_params(params) is params

    def test_none_and_unknown_shapes(self) -> None:
        """Test None passes through and unknown shapes are redacted."""
        assert sanitize_sql_params(None) is None
        assert sanitize_sql_params(object()) == REDACTED
