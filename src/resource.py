"""
Concourse Slack Resource

Thin orchestration layer wiring check/in/out to the notification components.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

from .api.client import ConcourseApi, ProductionConcourseClient
from .api.http import build_session
from .config import ConfigurationError, HTTPConfig, SourceConfig
from .models.alert import AlertParams
from .models.build import BuildCoordinates
from .models.outcome import NotificationOutcome
from .notify.decision import should_notify
from .notify.message import build_message
from .notify.slack import SlackNotifier, build_payload

logger = logging.getLogger(__name__)

MISSING_SOURCE_ERROR = "missing resource configuration"
NO_VERSION = {"ref": "none"}


@dataclass
class InRequest:
    source: Optional[Dict[str, Any]] = None
    version: Optional[Dict[str, Any]] = None
    params: Optional[Dict[str, Any]] = None


@dataclass
class OutRequest:
    source: Optional[Dict[str, Any]] = None
    params: Optional[Dict[str, Any]] = None


@dataclass
class ResourceOutput:
    """What Concourse expects on stdout from `in` and `out`."""
    version: Dict[str, str]
    metadata: List[Dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"version": self.version, "metadata": self.metadata}


class SlackResource:
    """
    Facade implementing the three resource operations.

    Each `out` builds fresh components; nothing is shared between invocations.
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None,
                 http_config: Optional[HTTPConfig] = None):
        """
        Initialize the resource.

        Args:
            environ: Build metadata environment (defaults to os.environ)
            http_config: Timeouts for outgoing requests
        """
        self.environ = environ
        self.http_config = http_config or HTTPConfig.from_env()

    def check(self, source: Optional[Dict[str, Any]] = None,
              version: Optional[Dict[str, Any]] = None) -> List[Dict[str, str]]:
        """Notifications are never fetched, so there is nothing to check."""
        return []

    def in_(self, request: InRequest, dest: str) -> ResourceOutput:
        """Echo the requested version; nothing is written to `dest`."""
        return ResourceOutput(version=request.version or dict(NO_VERSION))

    def out(self, request: OutRequest, build_dir: str) -> ResourceOutput:
        outcome = self.notify(request, build_dir)
        return ResourceOutput(version=outcome.to_version(), metadata=outcome.to_metadata())

    def _client_factory(self, source: SourceConfig, build: BuildCoordinates,
                        opened: List[ConcourseApi]) -> Callable[[], ConcourseApi]:
        def factory() -> ConcourseApi:
            client = ProductionConcourseClient(
                build.external_url,
                session=build_session(source.ssl),
                timeout=self.http_config.timeout,
            )
            opened.append(client)
            if source.has_credentials:
                client.authenticate(source.username, source.password)
            return client
        return factory

    def notify(self, request: OutRequest, build_dir: str) -> NotificationOutcome:
        """
        Decide, render and deliver one notification.

        Raises:
            MessageFileError: if a required message file is missing
        """
        if request.source is None:
            return NotificationOutcome.failed(MISSING_SOURCE_ERROR)

        try:
            source = SourceConfig.from_dict(request.source)
            params = AlertParams.from_dict(request.params)
        except ConfigurationError as e:
            logger.error("Invalid configuration: %s", e)
            return NotificationOutcome.failed(str(e))

        if source.debug:
            logging.getLogger().setLevel(logging.DEBUG)

        channel = params.channel or source.channel
        build = BuildCoordinates.from_env(self.environ, external_url=source.concourse_url)

        opened: List[ConcourseApi] = []
        try:
            send = should_notify(params.alert_type, source.disabled or params.disabled,
                                 self._client_factory(source, build, opened), build)
        finally:
            for client in opened:
                client.close()
        if not send:
            return NotificationOutcome(sent=False, alert_type=params.alert_type, channel=channel)

        message = build_message(params, build, build_dir, default_channel=source.channel)
        payload = build_payload(message)
        logger.debug("Webhook payload: %s", payload)

        error = SlackNotifier(source.url, timeout=self.http_config.timeout).send(payload)
        if error:
            return NotificationOutcome.failed(error, alert_type=params.alert_type, channel=channel)
        logger.info("Sent %s notification", params.alert_type.value)
        return NotificationOutcome(sent=True, alert_type=params.alert_type, channel=channel)
