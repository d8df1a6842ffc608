"""
Unit tests for server configuration loading
"""

import pytest
import yaml

from taskhub_core.config import (
    DEFAULT_CONFIG,
    Settings,
    load_config_sections,
    load_settings,
    write_default_config,
)
from taskhub_core.constants import DEFAULT_MAX_FILE_SIZE, DEFAULT_PORT

ENV_VARS = [
    "TASKHUB_CONFIG", "TASKHUB_HOST", "PORT", "TASKHUB_ENV", "TASKHUB_LOG_LEVEL",
    "TASKHUB_CORS_ORIGINS", "TASKHUB_DATABASE_URL", "TASKHUB_UPLOAD_DIR",
    "TASKHUB_MAX_FILE_SIZE", "TASKHUB_SECRET_KEY", "TASKHUB_TOKEN_TTL_DAYS",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """No ambient config: empty environment and a cwd without config files."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


class TestLoadSettings:
    """Test settings resolution order"""

    def test_defaults(self):
        settings = load_settings()
        assert settings.port == DEFAULT_PORT
        assert settings.max_file_size == DEFAULT_MAX_FILE_SIZE
        assert settings.env == "development"
        assert settings.cors_origins == []

    def test_yaml_file(self, tmp_path):
        config_file = tmp_path / "custom.yaml"
        with open(config_file, "w") as f:
            yaml.dump({"server": {"port": 8080}, "auth": {"token_ttl_days": 1}}, f)

        settings = load_settings(str(config_file))

        assert settings.port == 8080
        assert settings.token_ttl_days == 1
        # untouched options keep their defaults
        assert settings.host == DEFAULT_CONFIG["server"]["host"]

    def test_local_config_discovered(self, tmp_path):
        with open(tmp_path / ".taskhub.yaml", "w") as f:
            yaml.dump({"storage": {"upload_dir": "blobs"}}, f)
        assert load_settings().upload_dir == "blobs"

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        config_file = tmp_path / "custom.yaml"
        with open(config_file, "w") as f:
            yaml.dump({"server": {"port": 8080}}, f)
        monkeypatch.setenv("PORT", "9090")
        monkeypatch.setenv("TASKHUB_CORS_ORIGINS", "http://a.test, http://b.test")
        monkeypatch.setenv("TASKHUB_ENV", "production")

        settings = load_settings(str(config_file))

        assert settings.port == 9090
        assert settings.cors_origins == ["http://a.test", "http://b.test"]
        assert settings.secure_cookies is True

    def test_config_path_from_env(self, tmp_path, monkeypatch):
        config_file = tmp_path / "elsewhere.yaml"
        with open(config_file, "w") as f:
            yaml.dump({"server": {"log_level": "DEBUG"}}, f)
        monkeypatch.setenv("TASKHUB_CONFIG", str(config_file))
        assert load_settings().log_level == "DEBUG"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config_sections(str(tmp_path / "nope.yaml"))

    def test_non_mapping_file(self, tmp_path):
        config_file = tmp_path / "list.yaml"
        config_file.write_text("- just\n- a list\n")
        with pytest.raises(ValueError):
            load_config_sections(str(config_file))


class TestSettings:
    """Test derived settings behavior"""

    def test_ensure_secret_generates_once(self):
        settings = Settings()
        first = settings.ensure_secret()
        assert first
        assert settings.ensure_secret() == first

    def test_ensure_secret_keeps_configured_key(self):
        assert Settings(secret_key="fixed").ensure_secret() == "fixed"

    def test_to_dict_masks_secret(self):
        data = Settings(secret_key="fixed").to_dict()
        assert data["secret_key"] == "***"
        assert Settings(secret_key="fixed").to_dict(mask_secret=False)["secret_key"] == "fixed"

    def test_write_default_config(self, tmp_path):
        path = write_default_config(str(tmp_path / "out.yaml"))
        with open(path) as f:
            assert yaml.safe_load(f) == DEFAULT_CONFIG
