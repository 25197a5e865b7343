"""Transport implementations."""

from .base import Transport
from .payload import (
    decode_form_body,
    encode_form_body,
    message_from_payload,
    message_to_payload,
    serialize_message,
)
from .slack_webhook import Delivery, DeliveryState, SlackWebhookTransport

__all__ = [
    "Delivery",
    "DeliveryState",
    "SlackWebhookTransport",
    "Transport",
    "decode_form_body",
    "encode_form_body",
    "message_from_payload",
    "message_to_payload",
    "serialize_message",
]
