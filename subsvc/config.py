"""Service configuration from the environment, a .env file and config.yaml."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

DEFAULT_PORT = 8040


class ConfigError(Exception):
    """Raised when the configuration is incomplete."""


@dataclass(frozen=True)
class Config:
    """Settings the service runs with."""

    port: int
    db_url: str
    app_env: str


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        with path.open(encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        if not isinstance(data, dict):
            raise ValueError("top level is not a mapping")
    except (OSError, yaml.YAMLError, ValueError) as exc:
        print("No config.yaml loaded, using defaults and ENV:", exc)
        return {}
    return {str(key).lower(): value for key, value in data.items()}


def load_config(config_dir: str | os.PathLike = ".", env_file: Optional[str | os.PathLike] = ".env") -> Config:
    """Build the configuration; environment variables win over config.yaml."""
    if env_file is not None:
        load_dotenv(env_file, override=False)
    file_values = _read_config_file(Path(config_dir) / "config.yaml")

    def lookup(key: str, default: Any = None) -> Any:
        return os.environ.get(key.upper()) or file_values.get(key, default)

    def text(value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, bool):
            return str(value).lower()
        return str(value)

    try:
        port = int(str(lookup("port", DEFAULT_PORT)).strip())
    except ValueError:
        port = 0

    config = Config(port=port, db_url=text(lookup("db_url")), app_env=text(lookup("app_env")))
    if not config.db_url:
        raise ConfigError("DB_URL is required")
    return config