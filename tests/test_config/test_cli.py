"""Tests for command line parsing and application startup."""

import pytest
from pydantic import ValidationError

from login_prober.main import ProberApp, main, parse_args
from login_prober.config.models import ProberSettings


class TestParseArgs:
    """Test suite for parse_args."""

    def test_defaults(self, monkeypatch):
        """Test defaults with no flags and no environment."""
        for key in ("CONFIG", "LISTEN_IP", "LISTEN_PORT", "LOG_LEVEL", "TIMEOUT"):
            monkeypatch.delenv(f"LOGIN_PROBER_{key}", raising=False)

        settings = parse_args([])

        assert settings == ProberSettings()

    def test_flags(self):
        """Test that every flag is parsed."""
        settings = parse_args([
            "--config", "/tmp/login.yml",
            "--listen-ip", "0.0.0.0",
            "--listen-port", "9999",
            "--log-level", "DEBUG",
            "--timeout", "15",
            "--headed",
        ])

        assert settings.config_path == "/tmp/login.yml"
        assert settings.listen_ip == "0.0.0.0"
        assert settings.listen_port == 9999
        assert settings.log_level == "DEBUG"
        assert settings.timeout == 15
        assert settings.headless is False

    def test_environment_defaults(self, monkeypatch):
        """Test defaults taken from the environment."""
        monkeypatch.setenv("LOGIN_PROBER_LISTEN_PORT", "9100")
        monkeypatch.setenv("LOGIN_PROBER_TIMEOUT", "20")
        monkeypatch.setenv("LOGIN_PROBER_LOG_LEVEL", "warning")

        settings = parse_args([])

        assert settings.listen_port == 9100
        assert settings.timeout == 20
        assert settings.log_level == "WARNING"

    def test_flag_overrides_environment(self, monkeypatch):
        """Test that a flag overrides the environment."""
        monkeypatch.setenv("LOGIN_PROBER_LISTEN_PORT", "9100")
        assert parse_args(["--listen-port", "9200"]).listen_port == 9200

    def test_bad_environment_value(self, monkeypatch):
        """Test that a malformed environment value is rejected."""
        monkeypatch.setenv("LOGIN_PROBER_LISTEN_PORT", "not-a-port")
        with pytest.raises(ValueError):
            parse_args([])

    def test_unknown_environment_log_level(self, monkeypatch):
        """Test that an unknown log level from the environment is rejected."""
        monkeypatch.setenv("LOGIN_PROBER_LOG_LEVEL", "trace")
        with pytest.raises(ValidationError, match="log_level"):
            parse_args([])


class TestMain:
    """Test suite for the CLI entry point."""

    def test_unknown_environment_log_level_exits_2(self, monkeypatch):
        """Test exit code 2 for an unknown log level from the environment."""
        monkeypatch.setenv("LOGIN_PROBER_LOG_LEVEL", "trace")

        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 2

    def test_invalid_flag_exits_2(self):
        """Test exit code 2 for an invalid flag value."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--listen-port", "70000"])

        assert exc_info.value.code == 2


class TestStartup:
    """Test suite for application startup."""

    def test_missing_config_exits(self, tmp_path):
        """Test exit code 1 when the config file is missing."""
        settings = ProberSettings(config_path=str(tmp_path / "absent.yml"))

        with pytest.raises(SystemExit) as exc_info:
            ProberApp(settings)

        assert exc_info.value.code == 1

    def test_invalid_config_exits(self, tmp_path):
        """Test exit code 1 when the config file is invalid."""
        path = tmp_path / "login.yml"
        path.write_text("targets:\n  - target: x\n    url: not-a-url\n")

        with pytest.raises(SystemExit) as exc_info:
            ProberApp(ProberSettings(config_path=str(path)))

        assert exc_info.value.code == 1

    def test_valid_config_builds_app(self, tmp_path):
        """Test that a valid config builds the app."""
        path = tmp_path / "login.yml"
        path.write_text(
            "targets:\n"
            "  - target: sso\n"
            "    url: https://sso.example.com/\n"
            "    logout_url: https://sso.example.com/logout\n"
            "    username: u\n"
            "    password: p\n"
            "    expected_text: Welcome\n"
            "    login_type: federated\n"
        )

        app = ProberApp(ProberSettings(config_path=str(path)))

        assert app.configs.find_target("sso") is not None
        assert any(getattr(route, "path", None) == "/probe" for route in app.app.routes)
