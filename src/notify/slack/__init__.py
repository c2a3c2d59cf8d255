"""
Slack Notification Module

Provides attachment-formatted notifications over incoming webhooks.
"""

from .client import SlackNotifier
from .blocks import (
    build_attachment,
    build_payload,
)

__all__ = [
    'SlackNotifier',
    'build_attachment',
    'build_payload',
]
