from dataclasses import dataclass, field
import os
import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# Default request timeout (seconds) for Concourse API and webhook calls
DEFAULT_TIMEOUT = 10


class ConfigurationError(ValueError):
    """Raised when source or params configuration is malformed."""
    pass


def get_timeout() -> int:
    """
    Get the HTTP timeout from environment variable or default.

    Returns:
        Timeout in seconds
    """
    raw = os.getenv('HTTP_TIMEOUT')
    if raw is None:
        return DEFAULT_TIMEOUT
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring invalid HTTP_TIMEOUT %r, using %ds", raw, DEFAULT_TIMEOUT)
        return DEFAULT_TIMEOUT


@dataclass
class HTTPConfig:
    timeout: int = DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls) -> 'HTTPConfig':
        return cls(timeout=get_timeout())


@dataclass
class ClientCertificate:
    cert: str
    key: str


@dataclass
class SslConfiguration:
    ignore_ssl: bool = False
    ca_cert: Optional[str] = None
    client_cert: Optional[ClientCertificate] = None

    @property
    def is_default(self) -> bool:
        return not self.ignore_ssl and self.ca_cert is None and self.client_cert is None


@dataclass
class SourceConfig:
    """Resource-level configuration supplied in the pipeline's `source` block."""

    url: str
    channel: Optional[str] = None
    concourse_url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    ssl: SslConfiguration = field(default_factory=SslConfiguration)
    disabled: bool = False
    debug: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SourceConfig':
        """
        Build a source config from the decoded `source` JSON object.

        Raises:
            ConfigurationError: if the webhook url is missing or a field has the wrong shape
        """
        if not isinstance(data, dict):
            raise ConfigurationError("source must be a JSON object")
        url = data.get('url')
        if not url or not isinstance(url, str):
            raise ConfigurationError("source.url (webhook URL) is required")

        client_cert = None
        raw_cert = data.get('client_cert')
        if raw_cert is not None:
            if not isinstance(raw_cert, dict) or 'cert' not in raw_cert or 'key' not in raw_cert:
                raise ConfigurationError("source.client_cert must contain 'cert' and 'key'")
            client_cert = ClientCertificate(cert=raw_cert['cert'], key=raw_cert['key'])

        return cls(
            url=url,
            channel=data.get('channel'),
            concourse_url=data.get('concourse_url'),
            username=data.get('username'),
            password=data.get('password'),
            ssl=SslConfiguration(
                ignore_ssl=bool(data.get('ignore_ssl', False)),
                ca_cert=data.get('ca_cert'),
                client_cert=client_cert,
            ),
            disabled=bool(data.get('disabled', False)),
            debug=bool(data.get('debug', False)),
        )

    @property
    def has_credentials(self) -> bool:
        return bool(self.username and self.password)
