"""Concourse Slack Notifier - Main package.

This package provides a Concourse resource that posts build notifications to Slack.

Modules:
    models - Data models (dataclasses)
    api - Concourse API client and HTTP transport
    notify - Notification decision, formatting and delivery
    config - Configuration
    resource - check/in/out orchestration
"""

from .config import SourceConfig, HTTPConfig
from .resource import SlackResource

__all__ = [
    'SourceConfig',
    'HTTPConfig',
    'SlackResource',
]

__version__ = '1.0.0'
