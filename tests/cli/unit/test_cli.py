"""
Unit tests for the taskhub CLI commands
"""

import pytest
import yaml
from click.testing import CliRunner

from taskhub_cli.main import cli
from taskhub_cli.utils.errors import CLIError, ConfigError, suggest_fix
from taskhub_core.config import DEFAULT_CONFIG


@pytest.fixture
def runner(monkeypatch, tmp_path):
    for name in ("TASKHUB_CONFIG", "TASKHUB_SECRET_KEY", "TASKHUB_DATABASE_URL", "PORT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return CliRunner()


class TestCLIBasics:
    """Test top-level CLI behavior"""

    def test_help_lists_commands(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for name in ("serve", "init-db", "config"):
            assert name in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "taskhub" in result.output


class TestConfigCommands:
    """Test config init / show"""

    def test_init_writes_defaults(self, runner, tmp_path):
        result = runner.invoke(cli, ["config", "init"])
        assert result.exit_code == 0
        with open(tmp_path / ".taskhub.yaml") as f:
            assert yaml.safe_load(f) == DEFAULT_CONFIG

    def test_init_refuses_to_overwrite(self, runner, tmp_path):
        (tmp_path / ".taskhub.yaml").write_text("server: {port: 1}\n")
        result = runner.invoke(cli, ["config", "init"])
        assert isinstance(result.exception, ConfigError)
        assert result.exception.exit_code == 3
        assert (tmp_path / ".taskhub.yaml").read_text() == "server: {port: 1}\n"

    def test_init_force(self, runner, tmp_path):
        (tmp_path / ".taskhub.yaml").write_text("server: {port: 1}\n")
        result = runner.invoke(cli, ["config", "init", "--force"])
        assert result.exit_code == 0
        with open(tmp_path / ".taskhub.yaml") as f:
            assert yaml.safe_load(f)["server"]["port"] == DEFAULT_CONFIG["server"]["port"]

    def test_show_masks_secret(self, runner, tmp_path):
        config_file = tmp_path / "custom.yaml"
        with open(config_file, "w") as f:
            yaml.dump({"auth": {"secret_key": "super-secret-value"}, "server": {"port": 4321}}, f)

        result = runner.invoke(cli, ["config", "show", "--config", str(config_file)])

        assert result.exit_code == 0
        assert "4321" in result.output
        assert "***" in result.output
        assert "super-secret-value" not in result.output

    def test_show_missing_file(self, runner, tmp_path):
        result = runner.invoke(cli, ["config", "show", "-c", str(tmp_path / "missing.yaml")])
        assert isinstance(result.exception, ConfigError)


class TestInitDb:
    """Test schema creation"""

    def test_creates_database_file(self, runner, tmp_path, monkeypatch):
        db_path = tmp_path / "nested" / "cli.db"
        monkeypatch.setenv("TASKHUB_DATABASE_URL", f"sqlite+aiosqlite:///{db_path}")

        result = runner.invoke(cli, ["init-db"])

        assert result.exit_code == 0, result.output
        assert db_path.exists()


class TestServe:
    """Test serve wiring without starting a server"""

    def test_serve_passes_factory_and_overrides(self, runner, monkeypatch):
        calls = []
        monkeypatch.setattr("uvicorn.run", lambda app, **kwargs: calls.append((app, kwargs)))
        monkeypatch.setattr("taskhub_cli.commands.serve.setup_logging", lambda level: None)

        result = runner.invoke(cli, ["serve", "--port", "8123"])

        assert result.exit_code == 0, result.output
        app, kwargs = calls[0]
        assert app == "taskhub_api.main:create_app"
        assert kwargs["factory"] is True
        assert kwargs["port"] == 8123
        assert kwargs["host"] == DEFAULT_CONFIG["server"]["host"]


class TestErrorHelpers:
    """Test CLI error utilities"""

    def test_cli_error_default_exit_code(self):
        assert CLIError("boom").exit_code == 1

    def test_suggest_fix_for_missing_file(self):
        assert "path" in suggest_fix(FileNotFoundError("Config file x does not exist")).lower()

    def test_no_suggestion_for_unknown(self):
        assert suggest_fix(Exception("mystery")) is None
