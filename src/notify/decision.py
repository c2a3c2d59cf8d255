"""Decide whether an alert should be sent."""

import logging
from typing import Callable, Optional

from ..api.client import ConcourseApi
from ..models.alert import AlertType
from ..models.build import BuildCoordinates
from ..models.outcome import BuildStatus

logger = logging.getLogger(__name__)


def previous_build_number(build_name: Optional[str]) -> int:
    """
    Number of the build before `build_name`.

    Rerun builds are named like "6.1"; the suffix is dropped so they compare
    against build 5. Unparsable names count as build 1.
    """
    try:
        current = int((build_name or '').split('.', 1)[0])
    except ValueError:
        current = 1
    return max(current - 1, 0)


def _send_for_previous(alert_type: AlertType, previous: Optional[BuildStatus]) -> bool:
    if alert_type == AlertType.BROKE:
        return previous == BuildStatus.SUCCEEDED
    # FIXED: unknown status is treated like "not broken"
    return previous is not None and previous != BuildStatus.SUCCEEDED


def should_notify(alert_type: AlertType, disabled: bool,
                  client_factory: Callable[[], ConcourseApi],
                  build: BuildCoordinates) -> bool:
    """
    Decide whether a notification should go out.

    Args:
        alert_type: Requested alert kind
        disabled: True if the source or params disable notifications
        client_factory: Builds an authenticated Concourse client; only called
            for alerts that depend on the previous build
        build: Coordinates of the current build

    Returns:
        True if the message should be sent
    """
    if disabled:
        logger.info("Notifications disabled, skipping")
        return False

    if not alert_type.needs_previous_build:
        return True

    if not (build.pipeline_name and build.job_name):
        logger.warning("No pipeline/job metadata, cannot check previous build for %s alert",
                       alert_type.value)
        return False

    number = previous_build_number(build.build_name)
    previous = client_factory().fetch_build_status(
        build.team_name,
        build.pipeline_name,
        build.instance_vars,
        build.job_name,
        number,
    )
    send = _send_for_previous(alert_type, previous)
    logger.debug("Previous build #%d status: %s, %s alert %s", number,
                 previous.value if previous else "unknown", alert_type.value,
                 "will be sent" if send else "skipped")
    return send
