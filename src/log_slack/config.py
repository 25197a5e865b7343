from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from log_slack.utils.url_utils import is_http_url

DEFAULT_WEBHOOK_ENV_VAR = "SLACK_WEBHOOK_URL"


class ConfigError(ValueError):
    """Raised when configuration is invalid."""


@dataclass(slots=True)
class AppenderSettings:
    webhook_url: str
    channel: str | None = None
    username: str | None = None
    icon_url: str | None = None
    icon_emoji: str | None = None
    add_attachment: bool = False
    # Reserved: the exception message field is always present on attachments.
    add_exception_trace_field: bool = False
    username_append_logger_name: bool = False
    level: str = "ERROR"
    timeout_seconds: float = 15
    max_workers: int = 4
    shutdown_timeout_seconds: float = 5

    def __post_init__(self) -> None:
        if not is_http_url(self.webhook_url):
            raise ConfigError("webhook_url must be an http(s) URL")
        if self.icon_url and self.icon_emoji:
            raise ConfigError("icon_url and icon_emoji are mutually exclusive; set only one")
        self.level = str(self.level).strip().upper()
        if not isinstance(logging.getLevelName(self.level), int):
            raise ConfigError(f"Unknown log level: {self.level}")
        if self.timeout_seconds <= 0:
            raise ConfigError("timeout_seconds must be > 0")
        if self.max_workers < 1:
            raise ConfigError("max_workers must be >= 1")
        if self.shutdown_timeout_seconds < 0:
            raise ConfigError("shutdown_timeout_seconds must be >= 0")


@dataclass(slots=True)
class AppConfig:
    appender: AppenderSettings
    log_level: str = "INFO"


def _as_optional_string(value: Any) -> str | None:
    if value is None:
        return None
    normalized = str(value).strip()
    return normalized or None


def _as_bool(value: Any, *, field_name: str) -> bool:
    if isinstance(value, bool):
        return value

    if isinstance(value, int) and value in {0, 1}:
        return bool(value)

    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"true", "1", "yes", "on"}:
            return True
        if normalized in {"false", "0", "no", "off"}:
            return False

    raise ConfigError(f"{field_name} must be a boolean")


def _as_int(value: Any, *, field_name: str, minimum: int | None = None) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{field_name} must be an integer")

    try:
        parsed = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{field_name} must be an integer") from exc

    if minimum is not None and parsed < minimum:
        raise ConfigError(f"{field_name} must be >= {minimum}")
    return parsed


def _as_float(value: Any, *, field_name: str, minimum: float | None = None) -> float:
    if isinstance(value, bool):
        raise ConfigError(f"{field_name} must be a number")

    try:
        parsed = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{field_name} must be a number") from exc

    if minimum is not None and parsed < minimum:
        raise ConfigError(f"{field_name} must be >= {minimum}")
    return parsed


def _as_level(value: Any, *, field_name: str, default: str) -> str:
    level = (_as_optional_string(value) or default).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigError(f"{field_name} is not a known log level: {level}")
    return level


def settings_from_mapping(
    raw: Mapping[str, Any],
    *,
    environ: Mapping[str, str] | None = None,
) -> AppenderSettings:
    """Build appender settings from a plain mapping (YAML section or dictConfig kwargs).

    ``webhook_url`` wins over ``webhook_env_var``; when neither yields a URL the
    default ``SLACK_WEBHOOK_URL`` environment variable is consulted.
    """
    if not isinstance(raw, Mapping):
        raise ConfigError("appender must be a mapping")

    env = os.environ if environ is None else environ

    webhook_url = _as_optional_string(raw.get("webhook_url"))
    if webhook_url is None:
        env_var = _as_optional_string(raw.get("webhook_env_var")) or DEFAULT_WEBHOOK_ENV_VAR
        webhook_url = _as_optional_string(env.get(env_var))
        if webhook_url is None:
            raise ConfigError(
                f"Missing Slack webhook URL: set appender.webhook_url or environment variable {env_var}"
            )

    return AppenderSettings(
        webhook_url=webhook_url,
        channel=_as_optional_string(raw.get("channel")),
        username=_as_optional_string(raw.get("username")),
        icon_url=_as_optional_string(raw.get("icon_url")),
        icon_emoji=_as_optional_string(raw.get("icon_emoji")),
        add_attachment=_as_bool(
            raw.get("add_attachment", False),
            field_name="appender.add_attachment",
        ),
        add_exception_trace_field=_as_bool(
            raw.get("add_exception_trace_field", False),
            field_name="appender.add_exception_trace_field",
        ),
        username_append_logger_name=_as_bool(
            raw.get("username_append_logger_name", False),
            field_name="appender.username_append_logger_name",
        ),
        level=_as_level(raw.get("level"), field_name="appender.level", default="ERROR"),
        timeout_seconds=_as_float(
            raw.get("timeout_seconds", 15),
            field_name="appender.timeout_seconds",
            minimum=0.001,
        ),
        max_workers=_as_int(
            raw.get("max_workers", 4),
            field_name="appender.max_workers",
            minimum=1,
        ),
        shutdown_timeout_seconds=_as_float(
            raw.get("shutdown_timeout_seconds", 5),
            field_name="appender.shutdown_timeout_seconds",
            minimum=0,
        ),
    )


def load_config(path: str | Path, *, environ: Mapping[str, str] | None = None) -> AppConfig:
    config_path = Path(path).expanduser().resolve()
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as handle:
        parsed = yaml.safe_load(handle) or {}

    if not isinstance(parsed, dict):
        raise ConfigError("Config root must be a mapping")

    raw_appender = parsed.get("appender", {}) or {}
    appender = settings_from_mapping(raw_appender, environ=environ)

    return AppConfig(
        appender=appender,
        log_level=_as_level(parsed.get("log_level"), field_name="log_level", default="INFO"),
    )
