from __future__ import annotations

from abc import ABC, abstractmethod

from log_slack.models import LogEvent, Message


class Notifier(ABC):
    @abstractmethod
    def build(self, event: LogEvent) -> Message:
        """Format a log event into a webhook message."""
