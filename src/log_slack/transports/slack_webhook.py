from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from enum import Enum

import requests

from log_slack.models import Message

from .base import Transport
from .payload import FORM_CONTENT_TYPE, encode_form_body, serialize_message


class DeliveryState(Enum):
    CREATED = "created"
    AWAITING_WRITE_STREAM = "awaiting-write-stream"
    WRITING_BODY = "writing-body"
    AWAITING_RESPONSE = "awaiting-response"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in {DeliveryState.COMPLETED, DeliveryState.FAILED}


class Delivery:
    """One in-flight POST; owns its encoded body until it completes or fails."""

    __slots__ = ("body", "state")

    def __init__(self, body: bytes) -> None:
        self.body = body
        self.state = DeliveryState.CREATED


class SlackWebhookTransport(Transport):
    """Fire-and-forget poster for Slack incoming webhooks.

    ``send`` hands the request to a worker pool and returns at once. Every
    failure (DNS, connect, timeout, write, protocol) ends that delivery
    silently; nothing is retried, logged or raised to the caller. Any HTTP
    status counts as a completed delivery and the response body is never read.
    """

    def __init__(
        self,
        webhook_url: str,
        timeout_seconds: float = 15,
        max_workers: int = 4,
    ) -> None:
        self.webhook_url = webhook_url
        self.timeout_seconds = timeout_seconds
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="log-slack",
        )
        self._in_flight: set[Delivery] = set()
        self._idle = threading.Condition()

    @property
    def in_flight(self) -> tuple[Delivery, ...]:
        with self._idle:
            return tuple(self._in_flight)

    def send(self, message: Message) -> None:
        delivery: Delivery | None = None
        try:
            body = encode_form_body(serialize_message(message)).encode("utf-8")
            delivery = Delivery(body)
            self._register(delivery)
            delivery.state = DeliveryState.AWAITING_WRITE_STREAM
            self._executor.submit(self._deliver, delivery)
        except Exception:  # noqa: BLE001
            if delivery is not None:
                self._finish(delivery, DeliveryState.FAILED)

    def wait_idle(self, timeout: float | None = None) -> bool:
        with self._idle:
            return self._idle.wait_for(lambda: not self._in_flight, timeout=timeout)

    def close(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _deliver(self, delivery: Delivery) -> None:
        try:
            delivery.state = DeliveryState.WRITING_BODY
            response = requests.post(
                self.webhook_url,
                data=delivery.body,
                headers={"Content-Type": FORM_CONTENT_TYPE},
                timeout=self.timeout_seconds,
                stream=True,
            )
            delivery.state = DeliveryState.AWAITING_RESPONSE
            response.close()
        except Exception:  # noqa: BLE001
            self._finish(delivery, DeliveryState.FAILED)
            return
        self._finish(delivery, DeliveryState.COMPLETED)

    def _register(self, delivery: Delivery) -> None:
        with self._idle:
            self._in_flight.add(delivery)

    def _finish(self, delivery: Delivery, state: DeliveryState) -> None:
        with self._idle:
            if delivery.state.terminal:
                return
            delivery.state = state
            self._in_flight.discard(delivery)
            if not self._in_flight:
                self._idle.notify_all()
