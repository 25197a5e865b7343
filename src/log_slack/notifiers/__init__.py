"""Notifier implementations."""

from .base import Notifier
from .slack_attachment import SlackMessageNotifier, attachment_color, build_message

__all__ = ["Notifier", "SlackMessageNotifier", "attachment_color", "build_message"]
