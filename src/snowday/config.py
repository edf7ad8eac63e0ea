"""Configuration for the snowday closure reconciliation service."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from urllib.parse import urlparse

from snowday.errors import ConfigurationError


@dataclass
class Thresholds:
    match: float = 85.0  # score must be strictly greater
    type_override: float = 90.0
    short_name: float = 90.0
    short_name_length: int = 5
    no_significant_words: float = 95.0
    shared_word: float = 82.0
    high_confidence: float = 90.0  # reporting band only


@dataclass
class SourceConfig:
    url: str | None = None
    timeout: float = 10.0
    user_agent: str = "snowday/1.0 (+https://misnowday.com)"
    row_selector: str = ".closing"
    name_selector: str = ".text--primary.js-sort-value"
    status_selector: str = ".text--secondary"
    closed_tokens: tuple[str, ...] = ("closed",)


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 3023
    allowed_origins: list[str] = field(default_factory=lambda: [
        "http://localhost:5173",
        "https://misnowday.com",
    ])
    refresh_interval: float = 250.0  # seconds
    max_age: int = 60  # Cache-Control hint, seconds


@dataclass
class RegistryConfig:
    path: str = "states/michigan.json"
    state: str | None = "Michigan"


@dataclass
class AppConfig:
    thresholds: Thresholds = field(default_factory=Thresholds)
    source: SourceConfig = field(default_factory=SourceConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    registry: RegistryConfig = field(default_factory=RegistryConfig)

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> AppConfig:
        """Build a config from environment variables over the defaults."""
        env = os.environ if environ is None else environ
        config = cls()

        url = env.get("SNOWDAY_SOURCE_URL")
        if url:
            config.source.url = validate_source_url(url)
        if "SNOWDAY_FETCH_TIMEOUT" in env:
            config.source.timeout = _positive_float(env, "SNOWDAY_FETCH_TIMEOUT")

        if "SNOWDAY_REGISTRY" in env:
            config.registry.path = env["SNOWDAY_REGISTRY"]
        if "SNOWDAY_STATE" in env:
            # An empty value means the registry file has no state wrapper
            config.registry.state = env["SNOWDAY_STATE"] or None

        if "HOST" in env:
            config.server.host = env["HOST"]
        if "PORT" in env:
            config.server.port = int(_positive_float(env, "PORT"))
        if "SNOWDAY_REFRESH_SECONDS" in env:
            config.server.refresh_interval = _positive_float(env, "SNOWDAY_REFRESH_SECONDS")
        if "SNOWDAY_MAX_AGE" in env:
            config.server.max_age = int(_positive_float(env, "SNOWDAY_MAX_AGE"))
        if env.get("SNOWDAY_ALLOWED_ORIGINS"):
            config.server.allowed_origins = [
                o.strip() for o in env["SNOWDAY_ALLOWED_ORIGINS"].split(",") if o.strip()
            ]

        return config


def validate_source_url(url: str) -> str:
    """Reject anything that is not an absolute http(s) URL."""
    parsed = urlparse(url.strip())
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigurationError(f"invalid source url: {url!r}")
    return url.strip()


def _positive_float(env: dict[str, str], key: str) -> float:
    raw = env[key]
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ConfigurationError(f"{key} must be positive, got {raw!r}")
    return value
