from __future__ import annotations

import logging

from log_slack.config import AppenderSettings
from log_slack.handler import SlackLogHandler

_CONSOLE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(
    level: str = "INFO",
    settings: AppenderSettings | None = None,
) -> SlackLogHandler | None:
    """Configure console logging and, when settings are given, attach a Slack handler to the root logger."""
    logging.basicConfig(level=level.upper(), format=_CONSOLE_FORMAT)
    logging.getLogger().setLevel(level.upper())

    if settings is None:
        return None

    root = logging.getLogger()
    for existing in list(root.handlers):
        if isinstance(existing, SlackLogHandler):
            root.removeHandler(existing)
            existing.close()

    handler = SlackLogHandler(settings)
    root.addHandler(handler)
    return handler
