"""Alert parameters - the `params` block of a put step."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from ..config import ConfigurationError


class AlertType(Enum):
    """Kind of notification requested by the pipeline."""
    SUCCESS = "success"
    FAILED = "failed"
    STARTED = "started"
    ABORTED = "aborted"
    ERRORED = "errored"
    FIXED = "fixed"
    BROKE = "broke"
    CUSTOM = "custom"

    @property
    def label(self) -> str:
        """Human readable name used in message titles."""
        return self.value.capitalize()

    @property
    def needs_previous_build(self) -> bool:
        return self in (AlertType.FIXED, AlertType.BROKE)


class RenderMode(Enum):
    """How much build information goes into the message."""
    CONCISE = "concise"
    NORMAL = "normal"
    NORMAL_WITH_INFO = "normal_with_info"


def _parse_enum(enum_cls, value: Any, key: str, default):
    if value is None:
        return default
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ConfigurationError(f"invalid {key} '{value}' (expected one of: {allowed})")


def _optional_str(value: Any, key: str) -> Optional[str]:
    """Accept strings and YAML numbers (e.g. `color: 112233`) as text."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise ConfigurationError(f"invalid {key} {value!r} (expected a string)")


@dataclass
class AlertParams:
    """Per-invocation alert request."""

    alert_type: AlertType = AlertType.CUSTOM
    color: Optional[str] = None
    mode: RenderMode = RenderMode.NORMAL_WITH_INFO
    message: Optional[str] = None
    message_file: Optional[str] = None
    fail_if_message_file_missing: bool = False
    message_as_code: bool = False
    channel: Optional[str] = None
    disabled: bool = False

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'AlertParams':
        """
        Parse the decoded `params` JSON object. Missing keys take defaults.

        Raises:
            ConfigurationError: on an unknown alert_type or mode, or a text
                field that is neither a string nor a number
        """
        data = data or {}
        if not isinstance(data, dict):
            raise ConfigurationError("params must be a JSON object")
        return cls(
            alert_type=_parse_enum(AlertType, data.get('alert_type'), 'alert_type', AlertType.CUSTOM),
            color=_optional_str(data.get('color'), 'color'),
            mode=_parse_enum(RenderMode, data.get('mode'), 'mode', RenderMode.NORMAL_WITH_INFO),
            message=_optional_str(data.get('message'), 'message'),
            message_file=_optional_str(data.get('message_file'), 'message_file'),
            fail_if_message_file_missing=bool(data.get('fail_if_message_file_missing', False)),
            message_as_code=bool(data.get('message_as_code', False)),
            channel=_optional_str(data.get('channel'), 'channel'),
            disabled=bool(data.get('disabled', False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize back to the `params` shape, omitting unset optionals."""
        data: Dict[str, Any] = {
            'alert_type': self.alert_type.value,
            'mode': self.mode.value,
            'fail_if_message_file_missing': self.fail_if_message_file_missing,
            'message_as_code': self.message_as_code,
            'disabled': self.disabled,
        }
        for key in ('color', 'message', 'message_file', 'channel'):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data
