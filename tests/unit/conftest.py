"""Shared fixtures for unit tests."""

import os
from collections.abc import Generator
from typing import Any

import pytest
from pytest_mock import MockerFixture, MockType

from src.core.config import LogConfig, Settings, get_settings
from src.core.context import RequestContext
from src.core.error_context import _configured_sensitive_fields
from src.core.logging import _state


@pytest.fixture
def mock_settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Provide a real Settings object built from test environment variables.

    Returns:
        Settings: Settings with test defaults.
    """
    monkeypatch.setenv("APP_NAME", "TestApp")
    monkeypatch.setenv("APP_VERSION", "1.0.0")
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("DEBUG", "false")
    monkeypatch.setenv("API_HOST", "127.0.0.1")
    monkeypatch.setenv("API_PORT", "3000")
    monkeypatch.setenv("DATABASE_CONFIG__DATABASE_URL", "sqlite+aiosqlite://")
    monkeypatch.setenv("OBSERVABILITY_CONFIG__ENABLE_TRACING", "false")
    return Settings()


@pytest.fixture
def mock_main_dependencies(
    mocker: MockerFixture,
    mock_settings: Settings,
) -> dict[str, MockType]:
    """Mock the collaborators of the root ``main`` module.

    Returns:
        dict[str, MockType]: Mocks keyed by name.
    """
    mocks = {
        "get_settings": mocker.patch("main.get_settings"),
        "setup_logging": mocker.patch("main.setup_logging"),
        "logger": mocker.patch("main.logger"),
        "uvicorn_run": mocker.patch("uvicorn.run"),
    }
    mocks["get_settings"].return_value = mock_settings
    return mocks


@pytest.fixture
def mock_get_settings(mocker: MockerFixture) -> MockType:
    """Patch get_settings in error_context with custom sensitive fields.

    Returns:
        MockType: Mock get_settings function.
    """
    mock_settings = mocker.Mock(spec=Settings)
    mock_log_config = mocker.Mock(spec=LogConfig)
    mock_log_config.sensitive_fields = ["custom_secret", "Signature"]
    mock_settings.log_config = mock_log_config

    mock_get_settings_fn = mocker.patch("src.core.error_context.get_settings")
    mock_get_settings_fn.return_value = mock_settings
    _configured_sensitive_fields.cache_clear()
    return mock_get_settings_fn


@pytest.fixture
def sample_sensitive_data() -> dict[str, Any]:
    """Nested data with sensitive fields at several depths."""
    return {
        "username": "jane_doe",
        "password": "secret123",
        "author_id": 7,
        "profile": {
            "email": "jane@example.com",
            "api_key": "sk-1234567890",
            "settings": {"theme": "dark", "private_key": "rsa_placeholder"},
        },
        "items": [
            {"id": 1, "token": "item_token_1"},
            {"id": 2, "title": "Hello"},
        ],
        "pair": ("public", {"secret": "hidden"}),
    }


@pytest.fixture(autouse=True)
def clean_lru_cache() -> Generator[None]:
    """Clear cached settings before and after each test."""
    get_settings.cache_clear()
    _configured_sensitive_fields.cache_clear()
    yield
    get_settings.cache_clear()
    _configured_sensitive_fields.cache_clear()


@pytest.fixture(autouse=True)
def clean_env(
    monkeypatch: pytest.MonkeyPatch,
) -> Generator[pytest.MonkeyPatch]:
    """Drop application env vars so each test controls its own configuration.

    The database URL set by pytest-env is kept so that nothing tries to
    reach PostgreSQL.
    """
    original_env = os.environ.copy()

    env_prefixes = [
        "APP_",
        "API_",
        "ENVIRONMENT",
        "DEBUG",
        "LOG_CONFIG__",
        "OBSERVABILITY_CONFIG__",
        "PAGINATION_CONFIG__",
        "PORT",
    ]
    for key in list(os.environ.keys()):
        if any(key.startswith(prefix) for prefix in env_prefixes):
            monkeypatch.delenv(key, raising=False)

    yield monkeypatch

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture(autouse=True)
def clean_context() -> Generator[None]:
    """Clear the request context before and after each test."""
    RequestContext.clear()
    yield
    RequestContext.clear()


@pytest.fixture(autouse=True)
def logging_configured() -> Generator[None]:
    """Mark logging as configured so app creation never adds a stdout sink."""
    _state.configured = True
    yield
    _state.configured = True
