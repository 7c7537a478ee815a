"""TOML config loading and profiles."""

from __future__ import annotations

import atexit
import logging
import tomllib
from pathlib import Path
from typing import Any

# Default config search path (project root or cwd)
_CONFIG_DIR = Path(__file__).resolve().parent.parent.parent.parent / "config"
_CWD_CONFIG = Path.cwd() / "config"

# Open log file handle, if logging to a file; closed at exit or on reconfigure
_log_file: Any = None

DEFAULT_TAG_SLUGS = ("politics", "finance", "economics", "crypto")


def _load_toml(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base. Override values take precedence."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _find_config_dir(config_dir: Path | None = None) -> Path:
    if config_dir is not None:
        return Path(config_dir)
    if _CWD_CONFIG.exists():
        return _CWD_CONFIG
    return _CONFIG_DIR


def load_config(profile: str | None = None, config_dir: Path | None = None) -> dict[str, Any]:
    """Load merged config from default.toml and optional profile overlay."""
    directory = _find_config_dir(config_dir)
    default_path = directory / "default.toml"
    base = _load_toml(default_path) if default_path.exists() else {}
    if profile:
        profile_path = directory / f"{profile}.toml"
        if profile_path.exists():
            overlay = _load_toml(profile_path)
            base = _deep_merge(base, overlay)
    return base


def get_settings(profile: str | None = None, config_dir: Path | None = None) -> Settings:
    """Return Settings instance from merged config."""
    raw = load_config(profile, config_dir)
    return Settings.from_dict(raw)


class Settings:
    """Application settings from TOML config. Fixed for the process lifetime."""

    def __init__(
        self,
        *,
        api: dict[str, Any] | None = None,
        dashboard: dict[str, Any] | None = None,
        logging: dict[str, Any] | None = None,
    ):
        self.api = api or {}
        self.dashboard = dashboard or {}
        self.logging = logging or {}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Settings:
        return cls(
            api=raw.get("api"),
            dashboard=raw.get("dashboard"),
            logging=raw.get("logging"),
        )

    # Convenience accessors with defaults
    @property
    def api_base(self) -> str:
        return str(self.api.get("base", "https://gamma-api.polymarket.com")).rstrip("/")

    @property
    def market_limit(self) -> int:
        return int(self.api.get("market_limit", 100))

    @property
    def order(self) -> str:
        return str(self.api.get("order", "volume"))

    @property
    def tag_slugs(self) -> list[str]:
        slugs = self.api.get("tag_slugs")
        if slugs is None:
            return list(DEFAULT_TAG_SLUGS)
        return [str(s) for s in slugs]

    @property
    def request_timeout_sec(self) -> float:
        return float(self.api.get("request_timeout_sec", 30.0))

    @property
    def refresh_interval_ms(self) -> int:
        return int(self.dashboard.get("refresh_interval_ms", 2 * 60 * 1000))

    @property
    def default_threshold(self) -> int:
        return int(self.dashboard.get("default_threshold", 70))

    @property
    def logging_level(self) -> str:
        return self.logging.get("level", "INFO").upper()

    @property
    def logging_format(self) -> str:
        return self.logging.get("format", "console")

    @property
    def logging_file(self) -> str | None:
        return self.logging.get("file") or None

    @property
    def logging_level_num(self) -> int:
        return getattr(logging, self.logging_level, logging.INFO)


def configure_logging(settings: Settings) -> None:
    """Configure structlog with settings. Call once at application entry."""
    import structlog

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    global _log_file
    close_log_file()
    if settings.logging_file:
        # The TUI owns stdout; log lines go to the configured file instead
        _log_file = open(settings.logging_file, "a", encoding="utf-8")
    if settings.logging_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(settings.logging_level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=_log_file),
        cache_logger_on_first_use=True,
    )


def close_log_file() -> None:
    """Close the file opened by configure_logging, if any."""
    global _log_file
    if _log_file is not None:
        _log_file.close()
        _log_file = None


atexit.register(close_log_file)
