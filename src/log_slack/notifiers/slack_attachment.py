from __future__ import annotations

from log_slack.config import AppenderSettings
from log_slack.models import Attachment, Field, LogEvent, Message
from log_slack.utils.host_utils import HostIdentity, current_host_identity

from .base import Notifier

_WARNING_LEVELS = {"warn", "warning"}
_DANGER_LEVELS = {"error", "critical", "fatal"}


class SlackMessageNotifier(Notifier):
    def __init__(self, settings: AppenderSettings, host: HostIdentity | None = None) -> None:
        self.settings = settings
        self.host = host or current_host_identity()

    def build(self, event: LogEvent) -> Message:
        return build_message(event, self.settings, self.host)


def build_message(event: LogEvent, settings: AppenderSettings, host: HostIdentity) -> Message:
    logger_name = event.logger_name or ""

    username = settings.username
    if settings.username_append_logger_name:
        username = f"{username or ''} - {logger_name}"

    attachments: list[Attachment] = []
    if settings.add_attachment:
        attachments.append(
            build_attachment(
                event,
                host,
                include_logger_field=not settings.username_append_logger_name,
            )
        )

    return Message(
        text=event.message or "",
        username=username,
        channel=settings.channel,
        icon_url=settings.icon_url,
        icon_emoji=settings.icon_emoji,
        attachments=attachments,
    )


def build_attachment(
    event: LogEvent,
    host: HostIdentity,
    *,
    include_logger_field: bool,
) -> Attachment:
    level = event.level or ""
    logger_name = event.logger_name or ""

    fields = [Field("Exception Message", event.exception or "", short=True)]
    if include_logger_field:
        fields.append(Field("Logger", logger_name, short=True))
    fields.append(Field("Process", host.process_name, short=True))
    fields.append(Field("Machine", host.machine_name, short=True))

    return Attachment(
        fallback=f"[{level}] {logger_name} in {host.process_name} on {host.machine_name}",
        color=attachment_color(level),
        fields=fields,
    )


def attachment_color(level: str | None) -> str | None:
    normalized = (level or "").strip().lower()
    if normalized in _WARNING_LEVELS:
        return "warning"
    if normalized in _DANGER_LEVELS:
        return "danger"
    return None
