"""Tests for configuration loading and environment overrides."""

from __future__ import annotations

from pathlib import Path

from cleansight.config import AppConfig, apply_env_overrides, load_config


def test_defaults_without_file():
    cfg = load_config(None, environ={})

    assert cfg.server.port == 3333
    assert cfg.cache.ttl_seconds == 3600.0
    assert cfg.rate_limit.window_seconds == 900.0
    assert cfg.rate_limit.max_requests == 100
    assert cfg.fetch.timeout_seconds == 10.0
    assert cfg.extract.primary == "density"
    assert cfg.extract.fallback == ["readability"]


def test_yaml_values_are_merged(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "fetch:\n"
        "  timeout_seconds: 5\n"
        "extract:\n"
        "  primary: readability\n"
        "  fallback: [trafilatura]\n"
        "cache:\n"
        "  enabled: false\n"
        "unknown_section:\n"
        "  anything: 1\n"
        "server:\n"
        "  port: 8080\n"
        "  not_a_field: true\n",
        encoding="utf-8",
    )

    cfg = load_config(str(path), environ={})

    assert cfg.fetch.timeout_seconds == 5
    assert cfg.extract.primary == "readability"
    assert cfg.extract.fallback == ["trafilatura"]
    assert cfg.cache.enabled is False
    assert cfg.server.port == 8080
    assert cfg.logging.level == "INFO"


def test_empty_yaml_file_gives_defaults(tmp_path: Path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")

    assert load_config(str(path), environ={}) == AppConfig()


def test_environment_overrides():
    environ = {
        "PORT": "4000",
        "CACHE_TTL": "120",
        "LOG_LEVEL": "debug",
        "RATE_LIMIT_WINDOW": "60000",
        "RATE_LIMIT_MAX": "5",
    }

    cfg = load_config(None, environ=environ)

    assert cfg.server.port == 4000
    assert cfg.cache.ttl_seconds == 120.0
    assert cfg.logging.level == "debug"
    assert cfg.rate_limit.window_seconds == 60.0
    assert cfg.rate_limit.max_requests == 5


def test_unparseable_environment_numbers_are_ignored():
    cfg = apply_env_overrides(AppConfig(), {"PORT": "not-a-port", "CACHE_TTL": ""})

    assert cfg.server.port == 3333
    assert cfg.cache.ttl_seconds == 3600.0
