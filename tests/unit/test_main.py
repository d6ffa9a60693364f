"""Unit tests for the root main.py runner."""

import pytest
from pytest_mock import MockType

import main
from src.core.config import Settings


@pytest.mark.unit
class TestMain:
    """Test the uvicorn runner."""

    def test_loads_settings_and_sets_up_logging(
        self,
        mock_main_dependencies: dict[str, MockType],
        mock_settings: Settings,
    ) -> None:
        """Test that logging is configured before the server starts."""
        main.main()

        mock_main_dependencies["get_settings"].assert_called_once()
        mock_main_dependencies["setup_logging"].assert_called_once_with(mock_settings)

    @pytest.mark.parametrize(
        ("env_port", "expected_port"),
        [("8080", 8080), (None, 3000)],
    )
    def test_port_precedence(
        self,
        mock_main_dependencies: dict[str, MockType],
        monkeypatch: pytest.MonkeyPatch,
        env_port: str | None,
        expected_port: int,
    ) -> None:
        """Test that PORT overrides the configured port."""
        if env_port is not None:
            monkeypatch.setenv("PORT", env_port)

        main.main()

        assert mock_main_dependencies["uvicorn_run"].call_args.kwargs["port"] == (
            expected_port
        )

    def test_uvicorn_arguments(
        self, mock_main_dependencies: dict[str, MockType]
    ) -> None:
        """Test the application path, reload flag and intercepted loggers."""
        main.main()

        args = mock_main_dependencies["uvicorn_run"].call_args
        assert args.args == ("src.api.main:app",)
        assert args.kwargs["host"] == "127.0.0.1"
        assert args.kwargs["reload"] is False
        loggers = args.kwargs["log_config"]["loggers"]
        assert set(loggers) == set(main.UVICORN_LOGGERS)
        assert all(config["propagate"] is False for config in loggers.values())
