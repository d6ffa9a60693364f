"""Unit tests for the application factory in src/api/main.py."""

import pytest
from fastapi import FastAPI
from pytest_mock import MockerFixture

from src.api.main import create_app, lifespan
from src.api.middleware.request_context import RequestContextMiddleware
from src.api.middleware.request_logging import RequestLoggingMiddleware
from src.api.middleware.security_headers import SecurityHeadersMiddleware
from src.core.config import Settings


@pytest.mark.unit
class TestCreateApp:
    """Test application wiring."""

    def test_metadata_from_settings(self, mock_settings: Settings) -> None:
        """Test title, version and docs URL."""
        app = create_app(mock_settings)

        assert app.title == "TestApp"
        assert app.version == "1.0.0"
        assert app.docs_url == "/docs"

    def test_middleware_order(self, mock_settings: Settings) -> None:
        """Test that security headers wrap everything else."""
        app = create_app(mock_settings)

        classes = [middleware.cls for middleware in app.user_middleware]
        assert classes == [
            SecurityHeadersMiddleware,
            RequestContextMiddleware,
            RequestLoggingMiddleware,
        ]

    def test_routes_registered(self, mock_settings: Settings) -> None:
        """Test that every endpoint is mounted."""
        app = create_app(mock_settings)

        paths = set(app.openapi()["paths"])
        assert {
            "/",
            "/health",
            "/info",
            "/users",
            "/users/{user_id}",
            "/users/{user_id}/posts",
            "/posts",
            "/posts/{post_id}",
        } <= paths


@pytest.mark.unit
class TestLifespan:
    """Test startup and shutdown."""

    async def test_startup_creates_schema_and_shutdown_closes(
        self, mocker: MockerFixture
    ) -> None:
        """Test the happy path."""
        mocker.patch(
            "src.api.main.check_database_connection", return_value=(True, None)
        )
        mock_create = mocker.patch("src.api.main.create_schema")
        mock_close = mocker.patch("src.api.main.close_database")

        async with lifespan(FastAPI()):
            mock_create.assert_awaited_once()
            mock_close.assert_not_awaited()

        mock_close.assert_awaited_once()

    async def test_schema_creation_disabled(
        self, mocker: MockerFixture, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that tables are not created when switched off."""
        monkeypatch.setenv("DATABASE_CONFIG__CREATE_SCHEMA", "false")
        mocker.patch(
            "src.api.main.check_database_connection", return_value=(True, None)
        )
        mock_create = mocker.patch("src.api.main.create_schema")
        mocker.patch("src.api.main.close_database")

        async with lifespan(FastAPI()):
            pass

        mock_create.assert_not_awaited()

    async def test_unreachable_database_aborts_startup(
        self, mocker: MockerFixture
    ) -> None:
        """Test that startup fails when the database does not answer."""
        mocker.patch(
            "src.api.main.check_database_connection",
            return_value=(False, "connection refused"),
        )

        with pytest.raises(RuntimeError, match="connection refused"):
            async with lifespan(FastAPI()):
                pass
