from __future__ import annotations

import logging

from log_slack.config import AppenderSettings
from log_slack.models import LogEvent
from log_slack.notifiers import Notifier, SlackMessageNotifier
from log_slack.transports import SlackWebhookTransport, Transport
from log_slack.utils.host_utils import HostIdentity
from log_slack.utils.url_utils import redact_url

logger = logging.getLogger(__name__)


class SlackLogSink:
    """Formats log events and hands them to a transport; never raises to the caller."""

    def __init__(
        self,
        *,
        notifier: Notifier,
        transport: Transport,
        shutdown_timeout_seconds: float = 5,
    ) -> None:
        self.notifier = notifier
        self.transport = transport
        self.shutdown_timeout_seconds = shutdown_timeout_seconds

    @classmethod
    def from_settings(
        cls,
        settings: AppenderSettings,
        *,
        host: HostIdentity | None = None,
    ) -> SlackLogSink:
        logger.debug(
            "Creating Slack log sink for %s (attachments=%s)",
            redact_url(settings.webhook_url),
            settings.add_attachment,
        )
        return cls(
            notifier=SlackMessageNotifier(settings, host=host),
            transport=SlackWebhookTransport(
                settings.webhook_url,
                timeout_seconds=settings.timeout_seconds,
                max_workers=settings.max_workers,
            ),
            shutdown_timeout_seconds=settings.shutdown_timeout_seconds,
        )

    def append(self, event: LogEvent) -> None:
        message = self.notifier.build(event)
        self.transport.send(message)

    def flush(self, timeout: float | None = None) -> bool:
        return self.transport.wait_idle(timeout)

    def close(self) -> None:
        self.transport.wait_idle(self.shutdown_timeout_seconds)
        self.transport.close(wait=False)
