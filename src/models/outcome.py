"""Build status and notification outcome types."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from .alert import AlertType


class BuildStatus(Enum):
    """Status of a Concourse build as reported by the API."""
    STARTED = "started"
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    ERRORED = "errored"
    ABORTED = "aborted"

    @classmethod
    def parse(cls, value: Any) -> Optional['BuildStatus']:
        """Return the matching status, or None for absent/unknown values."""
        if not isinstance(value, str):
            return None
        try:
            return cls(value.lower())
        except ValueError:
            return None


@dataclass
class NotificationOutcome:
    """Result of a single `out` invocation."""

    sent: bool
    alert_type: Optional[AlertType] = None
    channel: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def failed(cls, error: str, alert_type: Optional[AlertType] = None,
               channel: Optional[str] = None) -> 'NotificationOutcome':
        """Create a not-sent outcome carrying an error."""
        return cls(sent=False, alert_type=alert_type, channel=channel, error=error)

    @property
    def summary(self) -> str:
        """Short sentence used as the resource version."""
        if self.sent:
            return f"sent to {self.channel}" if self.channel else "sent"
        if self.error:
            return f"not sent: {self.error}"
        return "not sent"

    def to_version(self) -> Dict[str, str]:
        return {"ref": self.summary}

    def to_metadata(self) -> List[Dict[str, str]]:
        """Render as Concourse name/value metadata pairs."""
        metadata = [
            {"name": "sent", "value": "true" if self.sent else "false"},
            {"name": "channel", "value": self.channel or ""},
            {"name": "alert_type", "value": self.alert_type.value if self.alert_type else ""},
        ]
        if self.error:
            metadata.append({"name": "error", "value": self.error})
        return metadata
