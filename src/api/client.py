"""Concourse API Client - Interface and implementations for Concourse API calls."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple
from urllib.parse import quote

import requests

from ..config import DEFAULT_TIMEOUT
from ..models.build import encode_instance_vars
from ..models.outcome import BuildStatus

logger = logging.getLogger(__name__)

# Public client credentials baked into `fly`
FLY_CLIENT_ID = "fly"
FLY_CLIENT_SECRET = "Zmx5"

MODERN_TOKEN_PATH = "sky/issuer/token"
MODERN_SCOPE = "openid profile email federated:id groups"
LEGACY_TOKEN_PATH = "sky/token"
LEGACY_SCOPE = "openid+profile+email+groups+federated:id"


class ConcourseApi(ABC):
    """Abstract interface for Concourse API calls."""

    @abstractmethod
    def authenticate(self, username: str, password: str) -> 'ConcourseApi':
        """Best-effort login. Never raises; returns self for chaining."""
        pass

    @abstractmethod
    def fetch_build_status(self, team: str, pipeline: str,
                           instance_vars: Optional[Dict[str, Any]],
                           job: str, build_number: int) -> Optional[BuildStatus]:
        """Get the status of a build, or None if it cannot be determined."""
        pass

    def close(self) -> None:
        """Release transport resources."""
        pass


class ProductionConcourseClient(ConcourseApi):
    """Concourse client talking to the ATC over HTTP with requests.

    Authentication tries the `/sky/issuer/token` endpoint first and falls back
    to the pre-7.x `/sky/token` endpoint. If both fail the client stays
    anonymous; callers only lose access to private pipelines.
    """

    def __init__(self, base_url: str, session: Optional[requests.Session] = None,
                 timeout: int = DEFAULT_TIMEOUT):
        self.base_url = base_url if base_url.endswith('/') else f"{base_url}/"
        self.session = session or requests.Session()
        self.timeout = timeout
        self.bearer: Optional[str] = None
        self._auth_attempted = False

    @property
    def is_authenticated(self) -> bool:
        return self.bearer is not None

    def close(self) -> None:
        self.session.close()

    def authenticate(self, username: str, password: str) -> 'ProductionConcourseClient':
        if self._auth_attempted:
            return self
        self._auth_attempted = True

        token = self._request_token(MODERN_TOKEN_PATH, username, password, MODERN_SCOPE,
                                    token_fields=('id_token', 'access_token'))
        if token is None:
            logger.debug("Token endpoint %s failed, trying legacy endpoint", MODERN_TOKEN_PATH)
            token = self._request_token(LEGACY_TOKEN_PATH, username, password, LEGACY_SCOPE,
                                        token_fields=('access_token',))

        if token is None:
            logger.warning("Could not authenticate to Concourse at %s, continuing anonymously",
                           self.base_url)
        else:
            logger.debug("Authenticated to Concourse as %s", username)
        self.bearer = token
        return self

    def _request_token(self, path: str, username: str, password: str, scope: str,
                       token_fields: Tuple[str, ...]) -> Optional[str]:
        """
        Run an OAuth password grant against one token endpoint.

        Args:
            path: Endpoint path relative to the base URL
            token_fields: Response fields to use as bearer, in order of preference

        Returns:
            Bearer token, or None on any transport, HTTP or decode failure
        """
        try:
            response = self.session.post(
                f"{self.base_url}{path}",
                auth=(FLY_CLIENT_ID, FLY_CLIENT_SECRET),
                data={
                    "grant_type": "password",
                    "username": username,
                    "password": password,
                    "scope": scope,
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.debug("Token request to %s failed: %s", path, e)
            return None

        if not isinstance(data, dict):
            return None
        for name in token_fields:
            token = data.get(name)
            if token:
                return token
        return None

    def build_url(self, team: str, pipeline: str, instance_vars: Optional[Dict[str, Any]],
                  job: str, build_number: int) -> str:
        url = (
            f"{self.base_url}api/v1/teams/{quote(team, safe='')}"
            f"/pipelines/{quote(pipeline, safe='')}"
            f"/jobs/{quote(job, safe='')}/builds/{build_number}"
        )
        if instance_vars:
            url = f"{url}?vars={encode_instance_vars(instance_vars)}"
        return url

    def fetch_build_status(self, team: str, pipeline: str,
                           instance_vars: Optional[Dict[str, Any]],
                           job: str, build_number: int) -> Optional[BuildStatus]:
        url = self.build_url(team, pipeline, instance_vars, job, build_number)
        headers = {}
        if self.bearer:
            headers["Authorization"] = f"Bearer {self.bearer}"

        try:
            response = self.session.get(url, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("Could not fetch build %s: %s", url, e)
            return None

        if not isinstance(data, dict):
            return None
        status = BuildStatus.parse(data.get("status"))
        logger.debug("Build %s has status %s", url, status.value if status else "unknown")
        return status


class MockConcourseClient(ConcourseApi):
    """Mock client for testing."""

    def __init__(self, status: Optional[BuildStatus] = None):
        self.status = status
        self.credentials: Optional[Tuple[str, str]] = None
        self.calls = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def authenticate(self, username: str, password: str) -> 'MockConcourseClient':
        self.credentials = (username, password)
        return self

    def fetch_build_status(self, team: str, pipeline: str,
                           instance_vars: Optional[Dict[str, Any]],
                           job: str, build_number: int) -> Optional[BuildStatus]:
        self.calls.append((team, pipeline, instance_vars, job, build_number))
        return self.status

    def set_status(self, status: Optional[BuildStatus]) -> None:
        """Test helper to set the status returned for every build."""
        self.status = status

    def reset(self) -> None:
        """Reset recorded calls."""
        self.calls = []
        self.credentials = None
