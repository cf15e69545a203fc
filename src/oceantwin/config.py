"""Connection settings for the ocean digital-twin API."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlparse

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_DATA_BASE_URL = "http://127.0.0.1:3000"
DEFAULT_TIMEOUT_MS = 10_000
JSON_HEADERS = {"Content-Type": "application/json"}


class ConfigError(ValueError):
    """Raised when client settings cannot be loaded or are invalid."""


class ClientConfig(BaseModel):
    """Base URL, timeout and default headers shared by every request."""

    base_url: str = Field(DEFAULT_BASE_URL, description="Service root, without trailing slash")
    timeout_ms: Optional[int] = Field(
        DEFAULT_TIMEOUT_MS, description="Per-request timeout in milliseconds; None waits forever"
    )
    headers: Dict[str, str] = Field(default_factory=lambda: dict(JSON_HEADERS))

    @field_validator("base_url")
    @classmethod
    def _check_base_url(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"base_url must be an http(s) URL, got {value!r}")
        return value

    @field_validator("headers")
    @classmethod
    def _merge_headers(cls, value: Dict[str, str]) -> Dict[str, str]:
        merged = dict(JSON_HEADERS)
        merged.update(value)
        return merged

    @field_validator("timeout_ms")
    @classmethod
    def _check_timeout(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value <= 0:
            raise ValueError("timeout_ms must be positive")
        return value

    @property
    def timeout(self) -> Optional[float]:
        """Timeout in seconds, as ``requests`` expects it."""
        if self.timeout_ms is None:
            return None
        return self.timeout_ms / 1000.0

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ClientConfig":
        try:
            return cls.model_validate(dict(data))
        except ValidationError as exc:
            raise ConfigError(f"Invalid client configuration: {exc}") from exc

    @classmethod
    def from_env(
        cls,
        prefix: str = "OCEAN_API",
        *,
        defaults: Optional["ClientConfig"] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "ClientConfig":
        """Overlay ``<PREFIX>_BASE_URL`` / ``<PREFIX>_TIMEOUT_MS`` onto ``defaults``."""

        env = os.environ if environ is None else environ
        data = (defaults or cls()).model_dump()
        base_url = env.get(f"{prefix}_BASE_URL")
        if base_url:
            data["base_url"] = base_url
        timeout = env.get(f"{prefix}_TIMEOUT_MS")
        if timeout:
            try:
                data["timeout_ms"] = int(timeout)
            except ValueError as exc:
                raise ConfigError(f"{prefix}_TIMEOUT_MS must be an integer, got {timeout!r}") from exc
        return cls.from_mapping(data)

    @classmethod
    def from_yaml(cls, path: Path) -> "ClientConfig":
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Config file {path} not found")
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
        if not isinstance(data, Mapping):
            raise ConfigError(f"Config file {path} must contain a mapping")
        return cls.from_mapping(data)


def load_env(path: Path = Path(".env")) -> None:
    """Seed ``os.environ`` from a dotenv file without overriding existing keys."""

    path = Path(path)
    if not path.exists():
        return
    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip().strip("'\""))


def data_config() -> ClientConfig:
    """Settings used by the layer fetchers when no client is supplied."""
    return ClientConfig(base_url=DEFAULT_DATA_BASE_URL, timeout_ms=None)
