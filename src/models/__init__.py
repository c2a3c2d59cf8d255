"""Data models - Dataclass definitions for builds, alerts and outcomes."""

from .build import BuildCoordinates
from .alert import AlertType, RenderMode, AlertParams
from .outcome import BuildStatus, NotificationOutcome

__all__ = [
    'BuildCoordinates',
    'AlertType',
    'RenderMode',
    'AlertParams',
    'BuildStatus',
    'NotificationOutcome',
]
