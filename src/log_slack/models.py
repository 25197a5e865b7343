from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True, slots=True)
class LogEvent:
    level: str
    level_no: int
    logger_name: str
    message: str
    exception: str | None = None
    timestamp: datetime | None = None


@dataclass(slots=True)
class Field:
    """A row in an attachment table. ``title`` is escaped by Slack, ``value`` may hold markup."""

    title: str
    value: str = ""
    short: bool = False


@dataclass(slots=True)
class Attachment:
    fallback: str
    pretext: str | None = None
    text: str | None = None
    # "good", "warning", "danger" or a hex color code.
    color: str | None = None
    fields: list[Field] = field(default_factory=list)
    mrkdwn_in: list[str] = field(default_factory=lambda: ["fields"])

    def __post_init__(self) -> None:
        if not self.fallback:
            raise ValueError("Attachment fallback text must not be empty")


@dataclass(slots=True)
class Message:
    text: str
    username: str | None = None
    channel: str | None = None
    icon_url: str | None = None
    icon_emoji: str | None = None
    attachments: list[Attachment] = field(default_factory=list)
