from __future__ import annotations

from abc import ABC, abstractmethod

from log_slack.models import Message


class Transport(ABC):
    @abstractmethod
    def send(self, message: Message) -> None:
        """Dispatch a message without blocking; delivery is best-effort."""

    def wait_idle(self, timeout: float | None = None) -> bool:
        return True

    def close(self, wait: bool = True) -> None:
        return None
