from __future__ import annotations

import logging
from typing import Any

from log_slack.config import AppenderSettings, settings_from_mapping
from log_slack.models import LogEvent
from log_slack.service import SlackLogSink
from log_slack.utils.datetime_utils import from_epoch_seconds

# Records from these loggers are dropped so that delivery never feeds itself.
_IGNORED_LOGGER_PREFIXES = ("log_slack", "urllib3", "requests")

_exception_formatter = logging.Formatter()


class SlackLogHandler(logging.Handler):
    """Logging handler that forwards records to a Slack incoming webhook.

    Build it from ``AppenderSettings`` or from keyword arguments, which makes
    it usable from ``logging.config.dictConfig``::

        "slack": {
            "()": "log_slack.handler.SlackLogHandler",
            "webhook_url": "https://hooks.slack.com/services/...",
            "add_attachment": True,
        }
    """

    def __init__(
        self,
        settings: AppenderSettings | None = None,
        *,
        sink: SlackLogSink | None = None,
        **options: Any,
    ) -> None:
        if settings is None:
            settings = settings_from_mapping(options)
        elif options:
            raise TypeError("Pass either settings or keyword options, not both")

        super().__init__(level=logging.getLevelName(settings.level))
        self.settings = settings
        self.sink = sink or SlackLogSink.from_settings(settings)

    def emit(self, record: logging.LogRecord) -> None:
        if _is_internal_logger(record.name):
            return
        try:
            self.sink.append(log_event_from_record(record))
        except Exception:  # noqa: BLE001
            self.handleError(record)

    def flush(self) -> None:
        self.sink.flush(self.settings.shutdown_timeout_seconds)

    def close(self) -> None:
        try:
            self.sink.close()
        finally:
            super().close()


def _is_internal_logger(name: str) -> bool:
    return any(
        name == prefix or name.startswith(f"{prefix}.") for prefix in _IGNORED_LOGGER_PREFIXES
    )


def log_event_from_record(record: logging.LogRecord) -> LogEvent:
    exception: str | None = None
    if record.exc_info and record.exc_info[0] is not None:
        exception = _exception_formatter.formatException(record.exc_info)
    elif record.exc_text:
        exception = record.exc_text

    return LogEvent(
        level=record.levelname,
        level_no=record.levelno,
        logger_name=record.name,
        message=record.getMessage(),
        exception=exception,
        timestamp=from_epoch_seconds(record.created),
    )
