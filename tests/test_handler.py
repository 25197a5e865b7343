from __future__ import annotations

import logging
import threading
import time
import uuid
from typing import Any

import pytest

from log_slack.config import AppenderSettings, ConfigError
from log_slack.handler import SlackLogHandler, log_event_from_record
from log_slack.models import Message
from log_slack.notifiers import SlackMessageNotifier
from log_slack.service import SlackLogSink
from log_slack.transports import SlackWebhookTransport, Transport
from log_slack.utils.host_utils import HostIdentity

WEBHOOK_URL = "https://hooks.slack.com/services/T000/B000/XXXX"
HOST = HostIdentity(process_name="worker", machine_name="build-01")


class RecordingTransport(Transport):
    def __init__(self) -> None:
        self.messages: list[Message] = []
        self.closed = False

    def send(self, message: Message) -> None:
        self.messages.append(message)

    def close(self, wait: bool = True) -> None:
        self.closed = True


class ExplodingTransport(Transport):
    def send(self, message: Message) -> None:
        raise RuntimeError("transport exploded")


def _handler(transport: Transport, **overrides: object) -> SlackLogHandler:
    values: dict[str, object] = {
        "webhook_url": WEBHOOK_URL,
        "username": "Bot",
        "add_attachment": True,
        "level": "WARNING",
    }
    values.update(overrides)
    settings = AppenderSettings(**values)  # type: ignore[arg-type]
    sink = SlackLogSink(
        notifier=SlackMessageNotifier(settings, host=HOST),
        transport=transport,
        shutdown_timeout_seconds=0,
    )
    return SlackLogHandler(settings, sink=sink)


@pytest.fixture
def app_logger():
    logger = logging.getLogger(f"App.Worker.{uuid.uuid4().hex}")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def test_error_record_is_forwarded_with_exception(app_logger: logging.Logger) -> None:
    transport = RecordingTransport()
    app_logger.addHandler(_handler(transport))

    try:
        raise ValueError("bad value")
    except ValueError:
        app_logger.exception("job %s failed", 42)

    assert len(transport.messages) == 1
    message = transport.messages[0]
    assert message.text == "job 42 failed"
    attachment = message.attachments[0]
    assert attachment.color == "danger"
    assert attachment.fallback == f"[ERROR] {app_logger.name} in worker on build-01"
    exception_field = attachment.fields[0]
    assert exception_field.title == "Exception Message"
    assert "ValueError: bad value" in exception_field.value
    assert "Traceback" in exception_field.value


def test_records_below_threshold_are_not_forwarded(app_logger: logging.Logger) -> None:
    transport = RecordingTransport()
    app_logger.addHandler(_handler(transport, level="ERROR"))

    app_logger.info("started")
    app_logger.warning("careful")
    app_logger.error("broken")

    assert [item.text for item in transport.messages] == ["broken"]


def test_warning_record_gets_warning_color(app_logger: logging.Logger) -> None:
    transport = RecordingTransport()
    app_logger.addHandler(_handler(transport))

    app_logger.warning("disk almost full")

    assert transport.messages[0].attachments[0].color == "warning"


def test_internal_loggers_are_ignored() -> None:
    transport = RecordingTransport()
    handler = _handler(transport)

    for name in ("log_slack.transports.slack_webhook", "urllib3.connectionpool", "requests"):
        record = logging.LogRecord(name, logging.ERROR, __file__, 1, "loop", None, None)
        handler.handle(record)

    record = logging.LogRecord("requests_cache_user", logging.ERROR, __file__, 1, "ok", None, None)
    handler.handle(record)

    assert [item.text for item in transport.messages] == ["ok"]


def test_transport_failure_never_reaches_caller(
    app_logger: logging.Logger, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(logging, "raiseExceptions", False)
    app_logger.addHandler(_handler(ExplodingTransport()))

    app_logger.error("still fine")


def test_close_closes_transport() -> None:
    transport = RecordingTransport()
    handler = _handler(transport)

    handler.close()

    assert transport.closed is True


class _DummyResponse:
    status_code = 200

    def close(self) -> None:
        return None


def test_close_waits_for_in_flight_delivery(monkeypatch: pytest.MonkeyPatch) -> None:
    finished: list[float] = []

    def slow_post(url: str, **kwargs: Any) -> _DummyResponse:
        time.sleep(0.3)
        finished.append(time.monotonic())
        return _DummyResponse()

    monkeypatch.setattr("requests.post", slow_post)
    handler = SlackLogHandler(
        AppenderSettings(webhook_url=WEBHOOK_URL, shutdown_timeout_seconds=5)
    )
    record = logging.LogRecord("App.Worker", logging.ERROR, __file__, 1, "boom", None, None)

    handler.handle(record)
    handler.close()

    assert len(finished) == 1
    assert handler.sink.transport.in_flight == ()


def test_close_with_zero_shutdown_timeout_does_not_wait(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    started = threading.Event()
    release = threading.Event()
    finished: list[bool] = []

    def blocked_post(url: str, **kwargs: Any) -> _DummyResponse:
        started.set()
        release.wait(5)
        finished.append(True)
        return _DummyResponse()

    monkeypatch.setattr("requests.post", blocked_post)
    handler = SlackLogHandler(
        AppenderSettings(webhook_url=WEBHOOK_URL, shutdown_timeout_seconds=0)
    )
    record = logging.LogRecord("App.Worker", logging.ERROR, __file__, 1, "boom", None, None)

    handler.handle(record)
    assert started.wait(5)
    handler.close()

    assert finished == []
    assert len(handler.sink.transport.in_flight) == 1

    release.set()
    assert handler.sink.transport.wait_idle(5)
    assert finished == [True]


def test_log_event_from_record_maps_fields() -> None:
    record = logging.LogRecord(
        "App.Worker", logging.ERROR, __file__, 10, "value=%s", ("x",), None
    )
    record.created = 1767999600.0

    event = log_event_from_record(record)

    assert event.level == "ERROR"
    assert event.level_no == logging.ERROR
    assert event.logger_name == "App.Worker"
    assert event.message == "value=x"
    assert event.exception is None
    assert event.timestamp is not None
    assert event.timestamp.timestamp() == 1767999600.0


def test_log_event_from_record_uses_cached_exception_text() -> None:
    record = logging.LogRecord("App", logging.ERROR, __file__, 10, "boom", None, None)
    record.exc_text = "Traceback: cached"

    assert log_event_from_record(record).exception == "Traceback: cached"


def test_handler_from_keyword_options_builds_default_sink() -> None:
    handler = SlackLogHandler(
        webhook_url=WEBHOOK_URL,
        add_attachment="yes",
        level="warning",
        channel="#alerts",
    )
    try:
        assert handler.level == logging.WARNING
        assert handler.settings.add_attachment is True
        assert handler.settings.channel == "#alerts"
        assert isinstance(handler.sink.transport, SlackWebhookTransport)
    finally:
        handler.close()


def test_handler_rejects_settings_and_options_together() -> None:
    settings = AppenderSettings(webhook_url=WEBHOOK_URL)

    with pytest.raises(TypeError):
        SlackLogHandler(settings, channel="#alerts")


def test_handler_options_are_validated() -> None:
    with pytest.raises(ConfigError):
        SlackLogHandler(
            webhook_url=WEBHOOK_URL,
            icon_url="https://example.test/icon.png",
            icon_emoji=":fire:",
        )
