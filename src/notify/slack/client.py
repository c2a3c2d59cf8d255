"""
Slack Webhook Client

Delivers notification payloads to a Slack incoming webhook.
"""

import logging
from typing import Any, Dict, Optional

import requests

from ...config import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)


class SlackNotifier:
    """
    Posts payloads to a Slack incoming webhook.

    Usage:
        notifier = SlackNotifier(source.url)
        error = notifier.send(build_payload(message))
        if error:
            ...
    """

    def __init__(self, webhook_url: str, session: Optional[requests.Session] = None,
                 timeout: int = DEFAULT_TIMEOUT):
        """
        Initialize Slack notifier.

        Args:
            webhook_url: Incoming webhook URL
            session: Optional requests session (a plain one is created otherwise)
            timeout: Request timeout in seconds
        """
        self._webhook_url = webhook_url
        self._session = session or requests.Session()
        self._timeout = timeout

    def send(self, payload: Dict[str, Any]) -> Optional[str]:
        """
        Send a payload to Slack. Makes exactly one attempt.

        Args:
            payload: Webhook payload

        Returns:
            None if sent successfully, otherwise an error description
        """
        try:
            response = self._session.post(
                self._webhook_url,
                json=payload,
                timeout=self._timeout,
            )
            response.raise_for_status()
            body = response.text
        except requests.RequestException as e:
            logger.error("Failed to send Slack notification: %s", e)
            return str(e) or e.__class__.__name__

        logger.debug("Slack notification sent successfully (%s)", body[:200])
        return None
