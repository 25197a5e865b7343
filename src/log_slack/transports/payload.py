from __future__ import annotations

import json
from typing import Any
from urllib.parse import parse_qs, quote

from log_slack.models import Attachment, Field, Message

FORM_FIELD = "payload"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


def message_to_payload(message: Message) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "channel": message.channel,
        "username": message.username,
        "icon_url": message.icon_url,
        "text": message.text,
        "attachments": [_attachment_to_payload(item) for item in message.attachments],
    }
    if message.icon_emoji:
        payload["icon_emoji"] = message.icon_emoji
    return payload


def _attachment_to_payload(attachment: Attachment) -> dict[str, Any]:
    return {
        "fallback": attachment.fallback,
        "pretext": attachment.pretext,
        "text": attachment.text,
        "color": attachment.color,
        "fields": [
            {"title": item.title, "value": item.value, "short": item.short}
            for item in attachment.fields
        ],
        "mrkdwn_in": list(attachment.mrkdwn_in),
    }


def message_from_payload(payload: dict[str, Any]) -> Message:
    raw_attachments = payload.get("attachments") or []
    return Message(
        text=payload.get("text") or "",
        username=payload.get("username"),
        channel=payload.get("channel"),
        icon_url=payload.get("icon_url"),
        icon_emoji=payload.get("icon_emoji"),
        attachments=[_attachment_from_payload(item) for item in raw_attachments],
    )


def _attachment_from_payload(raw: dict[str, Any]) -> Attachment:
    return Attachment(
        fallback=raw.get("fallback") or "",
        pretext=raw.get("pretext"),
        text=raw.get("text"),
        color=raw.get("color"),
        fields=[
            Field(
                title=item.get("title") or "",
                value=item.get("value") or "",
                short=bool(item.get("short", False)),
            )
            for item in raw.get("fields") or []
        ],
        mrkdwn_in=list(raw.get("mrkdwn_in") or ["fields"]),
    )


def serialize_message(message: Message) -> str:
    return json.dumps(message_to_payload(message), ensure_ascii=False, separators=(",", ":"))


def encode_form_body(json_text: str) -> str:
    # Encoded by hand rather than via requests data={...}: form encoding turns
    # spaces into "+", while webhook bodies use RFC 3986 escaping (%20).
    return f"{FORM_FIELD}={quote(json_text, safe='-_.~', encoding='utf-8')}"


def decode_form_body(body: str | bytes) -> dict[str, Any]:
    if isinstance(body, bytes):
        body = body.decode("utf-8")
    values = parse_qs(body, keep_blank_values=True).get(FORM_FIELD)
    if not values:
        raise ValueError(f"Form body has no '{FORM_FIELD}' field")
    decoded = json.loads(values[0])
    if not isinstance(decoded, dict):
        raise ValueError("Payload must decode to a JSON object")
    return decoded
