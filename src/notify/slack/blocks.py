"""
Slack Attachment Builders

Turns a RenderedMessage into a Slack incoming-webhook payload.
"""

from typing import Any, Dict, List, Optional

from ..message import RenderedMessage


def _field(title: str, value: str, short: bool = True) -> Dict[str, Any]:
    """Create an attachment field."""
    return {"title": title, "value": value, "short": short}


def _compact(data: Dict[str, Any]) -> Dict[str, Any]:
    """Drop keys whose value is None."""
    return {k: v for k, v in data.items() if v is not None}


def build_attachment(message: RenderedMessage) -> Dict[str, Any]:
    """
    Build the single attachment carrying the notification.

    Args:
        message: Rendered notification

    Returns:
        Attachment dict
    """
    fields: Optional[List[Dict[str, Any]]] = None
    if message.fields:
        fields = [_field(title, value) for title, value in message.fields]

    return _compact({
        "fallback": message.title,
        "author_name": message.title,
        "author_link": message.url,
        "text": message.text,
        "color": message.color,
        "fields": fields,
        "footer": message.url,
        "footer_icon": message.icon_url,
        "mrkdwn_in": ["text", "fields"],
    })


def build_payload(message: RenderedMessage) -> Dict[str, Any]:
    """
    Build the full webhook payload.

    Args:
        message: Rendered notification

    Returns:
        JSON-serializable payload for the incoming webhook
    """
    return _compact({
        "channel": message.channel,
        "attachments": [build_attachment(message)],
    })
