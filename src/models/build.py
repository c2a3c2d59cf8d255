"""Build coordinates - identify the build a notification is about."""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from urllib.parse import quote

logger = logging.getLogger(__name__)


def dump_json(value: Any) -> str:
    """Compact, key-sorted JSON so rendered labels and URLs are deterministic."""
    return json.dumps(value, sort_keys=True, separators=(',', ':'))


def encode_instance_vars(instance_vars: Dict[str, Any]) -> str:
    """Percent-encode instance vars for the `?vars=` query parameter."""
    return quote(dump_json(instance_vars), safe='')


@dataclass(frozen=True)
class BuildCoordinates:
    """Identifies a single Concourse build.

    `build_name` is kept as the string Concourse hands us (e.g. "42" or
    "6.1" for rerun builds).
    """
    team_name: str
    external_url: str
    pipeline_name: Optional[str] = None
    instance_vars: Optional[Dict[str, Any]] = field(default=None, hash=False)
    job_name: Optional[str] = None
    build_name: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None,
                 external_url: Optional[str] = None) -> 'BuildCoordinates':
        """
        Read build metadata from the environment Concourse sets for `out`.

        Args:
            environ: Mapping to read from (defaults to os.environ)
            external_url: Override for ATC_EXTERNAL_URL
        """
        env = os.environ if environ is None else environ

        instance_vars = None
        raw_vars = env.get('BUILD_PIPELINE_INSTANCE_VARS')
        if raw_vars:
            try:
                instance_vars = json.loads(raw_vars)
            except ValueError:
                logger.warning("Ignoring unparsable BUILD_PIPELINE_INSTANCE_VARS: %s", raw_vars)
            if not isinstance(instance_vars, dict) or not instance_vars:
                instance_vars = None

        return cls(
            team_name=env.get('BUILD_TEAM_NAME', 'main'),
            external_url=(external_url or env.get('ATC_EXTERNAL_URL', '')).rstrip('/'),
            pipeline_name=env.get('BUILD_PIPELINE_NAME') or None,
            instance_vars=instance_vars,
            job_name=env.get('BUILD_JOB_NAME') or None,
            build_name=env.get('BUILD_NAME') or None,
        )

    @property
    def is_complete(self) -> bool:
        """True when pipeline, job and build number are all known."""
        return bool(self.pipeline_name and self.job_name and self.build_name)
