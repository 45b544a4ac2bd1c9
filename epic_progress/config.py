"""Configuration: token from the environment, options from a YAML file.

Values are taken, from lowest to highest priority, from the defaults below,
an optional YAML config file and explicit overrides (the CLI options). The
token is read from ``GH_TOKEN`` or ``GITHUB_TOKEN``; a ``.env`` file in the
working directory is loaded first.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv

from .github import API_URL
from .resolver import STATUS_FIELD

TOKEN_VARIABLES = ("GH_TOKEN", "GITHUB_TOKEN")


class ConfigError(ValueError):
    """Raised when the configuration is missing or malformed."""


@dataclass
class Settings:
    token: str = ""
    project: Optional[str] = None
    milestone: Optional[str] = None
    status_field: str = STATUS_FIELD
    api_url: str = API_URL
    timeout: float = 30

    def require_token(self) -> str:
        if not self.token:
            raise ConfigError(
                f"{' or '.join(TOKEN_VARIABLES)} environment variable is required"
            )
        return self.token


FILE_KEYS = {f.name for f in fields(Settings)} - {"token"}
TEXT_KEYS = ("project", "milestone", "status_field", "api_url")


def _read_config_file(path: Path) -> dict:
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid config file {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config file {path}: root must be a mapping")
    unknown = set(data) - FILE_KEYS
    if unknown:
        raise ConfigError(f"Unknown config keys in {path}: {', '.join(sorted(unknown))}")
    for key in TEXT_KEYS:
        value = data.get(key)
        if value is not None and not isinstance(value, str):
            # YAML reads 1.0 or 2024 as numbers; milestones compare as text
            raise ConfigError(
                f"Invalid config file {path}: '{key}' must be a string, "
                f"got {value!r} (quote it)"
            )
    return data


def _env_token() -> str:
    for name in TOKEN_VARIABLES:
        value = os.getenv(name, "").strip()
        if value:
            return value
    return ""


def load_settings(path: Optional[Path] = None, **overrides) -> Settings:
    """Return :class:`Settings` merged from ``.env``, ``path`` and ``overrides``.

    Overrides that are ``None`` are ignored so CLI options left unset do not
    hide values from the config file.
    """
    load_dotenv()
    values = {"token": _env_token()}
    if path is not None:
        values.update(_read_config_file(path))
    values.update({k: v for k, v in overrides.items() if v is not None})
    try:
        settings = Settings(**values)
        settings.timeout = float(settings.timeout)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
    return settings


__all__ = ["ConfigError", "Settings", "load_settings"]
