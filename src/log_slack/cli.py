from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime, timezone

from log_slack.config import AppConfig, ConfigError, load_config
from log_slack.logging_config import setup_logging
from log_slack.models import LogEvent
from log_slack.notifiers import SlackMessageNotifier
from log_slack.service import SlackLogSink
from log_slack.transports import message_to_payload
from log_slack.utils.datetime_utils import format_datetime
from log_slack.utils.url_utils import redact_url

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="log-slack",
        description="Preview or send log notifications to a Slack incoming webhook.",
    )
    parser.add_argument(
        "-c",
        "--config",
        default="config.yaml",
        help="Path to config YAML file (default: config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        help="Override config log level (e.g. INFO, DEBUG)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    preview = subparsers.add_parser("preview", help="Print the payload that would be posted")
    send = subparsers.add_parser("send", help="Post a single test event to the webhook")
    for subparser in (preview, send):
        _add_event_arguments(subparser)

    send.add_argument(
        "--wait",
        type=float,
        help="Seconds to wait for the delivery to finish (default: shutdown_timeout_seconds)",
    )

    return parser


def _add_event_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("message", help="Log message text")
    parser.add_argument("--level", default="ERROR", help="Level name (default: ERROR)")
    parser.add_argument("--logger", default="log_slack.cli", help="Logger name to report")
    parser.add_argument("--exception", help="Exception text for the attachment field")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        app_config = load_config(args.config)
    except ConfigError as exc:
        print(f"Config error: {exc}", file=sys.stderr)
        return 2

    log_level = (args.log_level or app_config.log_level).upper()
    if not isinstance(logging.getLevelName(log_level), int):
        print(f"Config error: unknown log level {log_level}", file=sys.stderr)
        return 2
    setup_logging(log_level)

    event = _event_from_args(args)

    if args.command == "preview":
        _preview(app_config, event)
        return 0

    return _send(app_config, event, wait=args.wait)


def _event_from_args(args: argparse.Namespace) -> LogEvent:
    level = str(args.level).strip().upper()
    level_no = logging.getLevelName(level)
    return LogEvent(
        level=level,
        level_no=level_no if isinstance(level_no, int) else logging.NOTSET,
        logger_name=args.logger,
        message=args.message,
        exception=args.exception,
        timestamp=datetime.now(timezone.utc),
    )


def _preview(app_config: AppConfig, event: LogEvent) -> None:
    message = SlackMessageNotifier(app_config.appender).build(event)
    print(f"[PREVIEW] {event.level} event at {format_datetime(event.timestamp)}")
    print(json.dumps(message_to_payload(message), indent=2, ensure_ascii=False))
    print("")


def _send(app_config: AppConfig, event: LogEvent, *, wait: float | None) -> int:
    settings = app_config.appender
    timeout = settings.shutdown_timeout_seconds if wait is None else wait

    sink = SlackLogSink.from_settings(settings)
    try:
        sink.append(event)
        finished = sink.flush(timeout)
    finally:
        sink.close()

    if not finished:
        logger.warning(
            "Delivery to %s still in flight after %.1fs",
            redact_url(settings.webhook_url),
            timeout,
        )
        return 1

    logger.info("Dispatched %s event to %s", event.level, redact_url(settings.webhook_url))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
