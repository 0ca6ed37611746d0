from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, model_validator

from .constants import CONFIG_FILE, ENV_FILE, LOGGER


class _NullMeansDefault(BaseModel):
    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data):
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class RedirectUri(_NullMeansDefault):
    scheme: str = "http"
    host: str = "localhost"
    port: int = 8080
    path: str = "/"

    @property
    def url(self) -> str:
        return f"{self.scheme}://{self.host}:{self.port}{self.path}"


class ClientSettings(_NullMeansDefault):
    client_id: str = Field(min_length=1)
    client_secret: str = Field(min_length=1)
    scope: list[str] = Field(default_factory=list)
    redirect_uri: RedirectUri = Field(default_factory=RedirectUri)


def is_truthy(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_env_float(key: str, default: float) -> float:
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise RuntimeError(f"{key} must be a number.")


def load_env(path: Path = ENV_FILE) -> None:
    if not path.exists():
        return
    load_dotenv(path, override=True)


def _read_config_file(path: Path) -> dict:
    if not path.exists():
        LOGGER.warning("Config file %s not found; relying on environment", path)
        return {}

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as error:
        raise RuntimeError(f"Config file {path} is not valid JSON: {error}") from error
    if not isinstance(raw, dict):
        raise RuntimeError(f"Config file {path} is invalid; expected top-level JSON object.")
    return raw


def load_settings(path: str | Path | None = None) -> ClientSettings:
    config_path = Path(path or os.getenv("SPOTAUTH_CONFIG", "").strip() or CONFIG_FILE)
    raw = _read_config_file(config_path)

    overrides = {
        "client_id": os.getenv("SPOTIFY_CLIENT_ID", "").strip(),
        "client_secret": os.getenv("SPOTIFY_CLIENT_SECRET", "").strip(),
    }
    raw.update({key: value for key, value in overrides.items() if value})

    try:
        return ClientSettings.model_validate(raw)
    except ValidationError as error:
        raise RuntimeError(f"Invalid client configuration in {config_path}: {error}") from error


def http_timeout() -> float:
    return _get_env_float("SPOTAUTH_HTTP_TIMEOUT", 30.0)


def setup_logging() -> bool:
    debug_enabled = is_truthy(os.getenv("SPOTAUTH_DEBUG", "1"))
    if debug_enabled:
        logging.basicConfig(level=logging.INFO)
        LOGGER.setLevel(logging.INFO)
    return debug_enabled
