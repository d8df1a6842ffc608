"""
Configuration for the TaskHub server.

Settings are resolved in this order (last wins):
1. Dataclass defaults
2. YAML config file (explicit path, $TASKHUB_CONFIG, or ./.taskhub.yaml)
3. Environment variables (a local .env file is loaded first)
"""

import copy
import logging
import os
import secrets
from dataclasses import dataclass, asdict, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from taskhub_core.constants import (
    DEFAULT_DATABASE_URL,
    DEFAULT_HOST,
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_PORT,
    DEFAULT_TOKEN_TTL_DAYS,
    DEFAULT_UPLOAD_DIR,
)

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".taskhub.yaml"

DEFAULT_CONFIG: Dict[str, Dict[str, Any]] = {
    "server": {
        "host": DEFAULT_HOST,
        "port": DEFAULT_PORT,
        "env": "development",
        "log_level": "INFO",
        "cors_origins": [],
    },
    "storage": {
        "database_url": DEFAULT_DATABASE_URL,
        "upload_dir": DEFAULT_UPLOAD_DIR,
        "max_file_size": DEFAULT_MAX_FILE_SIZE,
    },
    "auth": {
        "secret_key": "",
        "token_ttl_days": DEFAULT_TOKEN_TTL_DAYS,
    },
}


def _split_csv(value: str) -> list:
    return [item.strip() for item in value.split(",") if item.strip()]


# env var -> (section, option, type)
ENV_OVERRIDES = {
    "TASKHUB_HOST": ("server", "host", str),
    "PORT": ("server", "port", int),
    "TASKHUB_ENV": ("server", "env", str),
    "TASKHUB_LOG_LEVEL": ("server", "log_level", str),
    "TASKHUB_CORS_ORIGINS": ("server", "cors_origins", _split_csv),
    "TASKHUB_DATABASE_URL": ("storage", "database_url", str),
    "TASKHUB_UPLOAD_DIR": ("storage", "upload_dir", str),
    "TASKHUB_MAX_FILE_SIZE": ("storage", "max_file_size", int),
    "TASKHUB_SECRET_KEY": ("auth", "secret_key", str),
    "TASKHUB_TOKEN_TTL_DAYS": ("auth", "token_ttl_days", int),
}


@dataclass
class Settings:
    """
    Effective server configuration.
    """
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    env: str = "development"  # anything else marks session cookies Secure
    log_level: str = "INFO"
    cors_origins: list[str] = field(default_factory=list)
    database_url: str = DEFAULT_DATABASE_URL
    upload_dir: str = DEFAULT_UPLOAD_DIR
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    secret_key: str = ""
    token_ttl_days: int = DEFAULT_TOKEN_TTL_DAYS

    @property
    def secure_cookies(self) -> bool:
        return self.env != "development"

    @property
    def upload_path(self) -> Path:
        return Path(self.upload_dir)

    def ensure_secret(self) -> str:
        """Return the signing secret, generating a process-local one if unset."""
        if not self.secret_key:
            self.secret_key = secrets.token_urlsafe(32)
            logger.warning(
                "No TASKHUB_SECRET_KEY configured; generated a temporary key. "
                "Sessions will not survive a restart."
            )
        return self.secret_key

    def to_dict(self, mask_secret: bool = True) -> Dict[str, Any]:
        data = asdict(self)
        if mask_secret and data["secret_key"]:
            data["secret_key"] = "***"
        return data


def _merge_config(config: Dict[str, Any], new_config: Dict[str, Any]) -> None:
    """Merge a loaded config into the section dict, section by section."""
    for key, value in new_config.items():
        if key in config and isinstance(config[key], dict) and isinstance(value, dict):
            config[key].update(value)
        else:
            config[key] = value


def _find_config_file(config_file: Optional[str]) -> Optional[Path]:
    if config_file:
        return Path(config_file)
    env_path = os.environ.get("TASKHUB_CONFIG", "").strip()
    if env_path:
        return Path(env_path)
    local_config = Path.cwd() / CONFIG_FILENAME
    if local_config.exists():
        return local_config
    return None


def load_config_sections(config_file: Optional[str] = None) -> Dict[str, Dict[str, Any]]:
    """
    Load the sectioned configuration (defaults + YAML + environment).

    Args:
        config_file: Optional explicit path to a YAML config file

    Returns:
        Dict keyed by section ("server", "storage", "auth")
    """
    load_dotenv()
    config = copy.deepcopy(DEFAULT_CONFIG)

    path = _find_config_file(config_file)
    if path is not None:
        if not path.exists():
            raise FileNotFoundError(f"Config file {path} does not exist")
        with open(path, "r") as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"Config file {path} must contain a YAML mapping")
        _merge_config(config, loaded)

    for env_name, (section, option, cast) in ENV_OVERRIDES.items():
        raw = os.environ.get(env_name, "").strip()
        if raw:
            config[section][option] = cast(raw)

    return config


def load_settings(config_file: Optional[str] = None) -> Settings:
    """Build Settings from every configuration source."""
    sections = load_config_sections(config_file)
    flat: Dict[str, Any] = {}
    for options in sections.values():
        if isinstance(options, dict):
            flat.update(options)
    known = Settings.__dataclass_fields__.keys()
    return Settings(**{k: v for k, v in flat.items() if k in known})


def write_default_config(output_file: str = CONFIG_FILENAME) -> Path:
    """Write the default sectioned config to a YAML file."""
    path = Path(output_file)
    with open(path, "w") as f:
        yaml.dump(copy.deepcopy(DEFAULT_CONFIG), f, default_flow_style=False)
    return path
