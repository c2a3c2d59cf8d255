"""
Notification decision and formatting

Provides:
- Previous-build based decisions for fixed/broke alerts
- Message rendering from alert params and build coordinates
- Slack webhook delivery
"""

from .decision import should_notify, previous_build_number
from .message import (
    FormattedBuildInfo,
    MessageFileError,
    RenderedMessage,
    build_message,
    format_build_info,
)
from .slack import SlackNotifier, build_payload

__all__ = [
    # Decision
    'should_notify',
    'previous_build_number',
    # Message
    'FormattedBuildInfo',
    'MessageFileError',
    'RenderedMessage',
    'build_message',
    'format_build_info',
    # Slack
    'SlackNotifier',
    'build_payload',
]
