from __future__ import annotations

from urllib.parse import urlsplit, urlunsplit


def is_http_url(url: str) -> bool:
    value = (url or "").strip()
    if not value:
        return False
    parsed = urlsplit(value)
    return parsed.scheme.lower() in {"http", "https"} and bool(parsed.netloc)


def redact_url(url: str) -> str:
    """Hide the path and query of a webhook URL; they carry the access token."""
    value = (url or "").strip()
    if not value:
        return value

    parsed = urlsplit(value)
    if not parsed.scheme or not parsed.netloc:
        return "***"

    netloc = parsed.hostname or ""
    if parsed.port:
        netloc = f"{netloc}:{parsed.port}"
    path = "/***" if parsed.path.strip("/") or parsed.query else ""
    return urlunsplit((parsed.scheme.lower(), netloc.lower(), path, "", ""))
