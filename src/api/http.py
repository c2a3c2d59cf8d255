"""HTTP transport - requests sessions with TLS trust overrides."""

import logging
import os
import tempfile
from typing import Optional

import requests
import urllib3

from ..config import SslConfiguration

logger = logging.getLogger(__name__)


class TLSSession(requests.Session):
    """requests session owning the temp directory its PEM files live in.

    requests only accepts certificate paths, so PEM text from the source
    config is written to disk; `close()` removes it again.
    """

    def __init__(self):
        super().__init__()
        self._pem_dir: Optional[tempfile.TemporaryDirectory] = None

    def write_pem(self, contents: str, name: str) -> str:
        """Write PEM text into the session's private temp dir and return the path."""
        if self._pem_dir is None:
            self._pem_dir = tempfile.TemporaryDirectory(prefix='concourse-slack-')
        path = os.path.join(self._pem_dir.name, name)
        with open(path, 'w') as handle:
            handle.write(contents)
        return path

    @property
    def pem_dir(self) -> Optional[str]:
        return self._pem_dir.name if self._pem_dir is not None else None

    def close(self) -> None:
        super().close()
        if self._pem_dir is not None:
            self._pem_dir.cleanup()
            self._pem_dir = None


def build_session(ssl: Optional[SslConfiguration] = None) -> TLSSession:
    """
    Create a requests session honouring the resource's TLS settings.

    Callers must close the session (or use it as a context manager) so
    any written certificates are removed.

    Args:
        ssl: TLS overrides from the source config (None = system defaults)

    Returns:
        Configured TLSSession
    """
    session = TLSSession()
    if ssl is None or ssl.is_default:
        return session

    if ssl.ignore_ssl:
        logger.debug("TLS certificate validation disabled")
        session.verify = False
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
    elif ssl.ca_cert:
        session.verify = session.write_pem(ssl.ca_cert, 'ca.pem')

    if ssl.client_cert is not None:
        session.cert = (
            session.write_pem(ssl.client_cert.cert, 'cert.pem'),
            session.write_pem(ssl.client_cert.key, 'key.pem'),
        )

    return session
