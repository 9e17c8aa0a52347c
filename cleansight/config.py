"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- FetchConfig: Outbound HTTP fetching settings
- ExtractConfig: Readability strategy chain and thresholds
- CacheConfig: In-memory response cache settings
- RateLimitConfig: Per-client request throttling
- ServerConfig: HTTP front door settings
- LoggingConfig: Logging behavior
- AppConfig: Root configuration container

A handful of environment variables override the file values so the
service can be tuned from a container environment.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
import os
from typing import Any, Mapping

import yaml


@dataclass
class FetchConfig:
    """Configuration for outbound page fetching.

    Attributes:
        timeout_seconds: Total time budget for one fetch
        user_agent: HTTP User-Agent header string
        follow_redirects: Whether redirects are followed
        trust_env: Whether to respect system proxy settings
    """

    timeout_seconds: float = 10.0
    user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )
    follow_redirects: bool = True
    trust_env: bool = True


@dataclass
class ExtractConfig:
    """Configuration for article extraction.

    Attributes:
        primary: Primary strategy ("density", "readability" or "trafilatura")
        fallback: Strategies to try, in order, when the primary finds nothing
        min_paragraph_chars: Shortest text block that counts as a paragraph
        min_content_chars: Shortest accepted article text
    """

    primary: str = "density"
    fallback: list[str] = field(default_factory=lambda: ["readability"])
    min_paragraph_chars: int = 25
    min_content_chars: int = 50


@dataclass
class CacheConfig:
    """Configuration for the response cache.

    Attributes:
        enabled: Whether transcoded payloads are cached
        ttl_seconds: Lifetime of a cache entry
        max_entries: Capacity; least recently used entries are dropped beyond it
    """

    enabled: bool = True
    ttl_seconds: float = 3600.0
    max_entries: int = 1000


@dataclass
class RateLimitConfig:
    """Configuration for per-client request throttling.

    Attributes:
        enabled: Whether throttling is applied
        window_seconds: Length of the counting window
        max_requests: Requests allowed per client per window
    """

    enabled: bool = True
    window_seconds: float = 900.0
    max_requests: int = 100


@dataclass
class ServerConfig:
    """Configuration for the HTTP front door.

    Attributes:
        host: Interface to bind
        port: Port to listen on
        cors_origins: Origins allowed by CORS
    """

    host: str = "0.0.0.0"
    port: int = 3333
    cors_origins: list[str] = field(default_factory=lambda: ["*"])


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to files
        format: Log file format ("jsonl" or "plain")
        directory: Directory for log files
        filename: Name of the main log file
        error_filename: Name of the error-only log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = False
    format: str = "jsonl"
    directory: str = "logs"
    filename: str = "combined.jsonl"
    error_filename: str = "error.jsonl"


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    fetch: FetchConfig = field(default_factory=FetchConfig)
    extract: ExtractConfig = field(default_factory=ExtractConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: str | None, environ: Mapping[str, str] | None = None) -> AppConfig:
    """Load configuration from a YAML file with defaults and env overrides."""
    raw: dict[str, Any] = {}
    if path:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

    cfg = _merge_config(AppConfig(), raw)
    return apply_env_overrides(cfg, os.environ if environ is None else environ)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig.

    Unknown sections and unknown keys are ignored.
    """
    data = asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            data[key].update({k: v for k, v in value.items() if k in data[key]})
    return _fromdict(data)


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(
        fetch=FetchConfig(**data["fetch"]),
        extract=ExtractConfig(**data["extract"]),
        cache=CacheConfig(**data["cache"]),
        rate_limit=RateLimitConfig(**data["rate_limit"]),
        server=ServerConfig(**data["server"]),
        logging=LoggingConfig(**data["logging"]),
    )


def apply_env_overrides(cfg: AppConfig, environ: Mapping[str, str]) -> AppConfig:
    """Apply the environment variables the service honours.

    PORT, CACHE_TTL (seconds), LOG_LEVEL, RATE_LIMIT_WINDOW (milliseconds)
    and RATE_LIMIT_MAX. Unparseable numbers are ignored.
    """
    port = _env_number(environ, "PORT", int)
    if port is not None:
        cfg.server.port = port
    ttl = _env_number(environ, "CACHE_TTL", int)
    if ttl is not None:
        cfg.cache.ttl_seconds = float(ttl)
    window_ms = _env_number(environ, "RATE_LIMIT_WINDOW", int)
    if window_ms is not None:
        cfg.rate_limit.window_seconds = window_ms / 1000.0
    max_requests = _env_number(environ, "RATE_LIMIT_MAX", int)
    if max_requests is not None:
        cfg.rate_limit.max_requests = max_requests
    level = environ.get("LOG_LEVEL")
    if level:
        cfg.logging.level = level
    return cfg


def _env_number(environ: Mapping[str, str], name: str, cast: type) -> Any:
    value = environ.get(name)
    if not value:
        return None
    try:
        return cast(value)
    except ValueError:
        return None
