"""
Message Builder

Turns alert params and build coordinates into a rendered notification.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple
from urllib.parse import quote

from ..models.alert import AlertParams, AlertType, RenderMode
from ..models.build import BuildCoordinates, dump_json, encode_instance_vars

logger = logging.getLogger(__name__)

ICON_BASE_URL = "https://ci.concourse-ci.org/public/images"

# Color and footer icon keyed by alert type.
PALETTE: Dict[AlertType, Tuple[str, str]] = {
    AlertType.SUCCESS: ("#32cd32", f"{ICON_BASE_URL}/favicon-succeeded.png"),
    AlertType.FIXED: ("#32cd32", f"{ICON_BASE_URL}/favicon-succeeded.png"),
    AlertType.FAILED: ("#d00000", f"{ICON_BASE_URL}/favicon-failed.png"),
    AlertType.BROKE: ("#d00000", f"{ICON_BASE_URL}/favicon-failed.png"),
    AlertType.STARTED: ("#f7cd42", f"{ICON_BASE_URL}/favicon-started.png"),
    AlertType.ABORTED: ("#8d4b32", f"{ICON_BASE_URL}/favicon-aborted.png"),
    AlertType.ERRORED: ("#f5a623", f"{ICON_BASE_URL}/favicon-errored.png"),
    AlertType.CUSTOM: ("#35495c", f"{ICON_BASE_URL}/favicon-pending.png"),
}

UNKNOWN_JOB = "unknown job"
UNKNOWN_BUILD = "unknown build"
UNKNOWN_BUILD_NUMBER = "unknown build number"


class MessageFileError(Exception):
    """Raised when a required message file cannot be read."""
    pass


@dataclass
class FormattedBuildInfo:
    """Labels and link describing the build."""
    job_label: str
    build_label: str
    build_number_label: str
    url: Optional[str] = None


@dataclass
class RenderedMessage:
    """Platform-neutral notification ready to be turned into a webhook payload."""
    title: str
    color: str
    icon_url: str
    text: Optional[str] = None
    url: Optional[str] = None
    fields: List[Tuple[str, str]] = field(default_factory=list)
    channel: Optional[str] = None


def format_instance_vars(instance_vars: Dict) -> str:
    """Render instance vars as `k1:v1,k2:v2`, keys sorted, values as JSON."""
    return ",".join(
        f"{key}:{dump_json(instance_vars[key])}" for key in sorted(instance_vars)
    )


def format_pipeline_ref(pipeline: str, instance_vars: Optional[Dict]) -> str:
    if instance_vars:
        return f"{pipeline}/{format_instance_vars(instance_vars)}"
    return pipeline


def format_build_info(build: BuildCoordinates) -> FormattedBuildInfo:
    """
    Compute job/build labels and the build deep link.

    Args:
        build: Coordinates of the current build

    Returns:
        FormattedBuildInfo; labels fall back to "unknown ..." placeholders
        and url is None when pipeline, job or build number is missing
    """
    if not build.is_complete:
        return FormattedBuildInfo(
            job_label=UNKNOWN_JOB,
            build_label=UNKNOWN_BUILD,
            build_number_label=UNKNOWN_BUILD_NUMBER,
        )

    pipeline_ref = format_pipeline_ref(build.pipeline_name, build.instance_vars)
    job_label = f"{pipeline_ref}/{build.job_name}"
    build_number_label = f"#{build.build_name}"

    url = (
        f"{build.external_url}/teams/{quote(build.team_name, safe='')}"
        f"/pipelines/{quote(build.pipeline_name, safe='')}"
        f"/jobs/{quote(build.job_name, safe='')}"
        f"/builds/{quote(build.build_name, safe='')}"
    )
    if build.instance_vars:
        url = f"{url}?vars={encode_instance_vars(build.instance_vars)}"

    return FormattedBuildInfo(
        job_label=job_label,
        build_label=f"{job_label} {build_number_label}",
        build_number_label=build_number_label,
        url=url,
    )


def _read_message_file(root: str, name: str) -> Optional[str]:
    base = Path(root).resolve()
    path = (base / name).resolve()
    if path != base and base not in path.parents:
        logger.warning("Message file %s is outside %s, ignoring", name, root)
        return None
    try:
        return path.read_text()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not read message file %s: %s", name, e)
        return None


def resolve_text(params: AlertParams, build_dir: str) -> Optional[str]:
    """
    Resolve the message body from params.

    A message file wins over inline text; inline text is the fallback when
    the file cannot be read.

    Raises:
        MessageFileError: if the file is unreadable, there is no inline text
            and `fail_if_message_file_missing` is set
    """
    if params.message_file:
        text = _read_message_file(build_dir, params.message_file)
        if text is None:
            if params.message is not None:
                text = params.message
            elif params.fail_if_message_file_missing:
                raise MessageFileError(f"message file '{params.message_file}' not found")
            else:
                text = f"_(no message: could not read file `{params.message_file}`)_"
    else:
        text = params.message

    if text is not None and params.message_as_code:
        text = f"```{text}```"
    return text


def resolve_color(params: AlertParams) -> str:
    if params.color:
        return params.color if params.color.startswith('#') else f"#{params.color}"
    return PALETTE[params.alert_type][0]


def build_message(params: AlertParams, build: BuildCoordinates, build_dir: str,
                  default_channel: Optional[str] = None) -> RenderedMessage:
    """
    Build the notification for an alert.

    Args:
        params: Alert params from the put step
        build: Coordinates of the current build
        build_dir: Directory message files are relative to
        default_channel: Channel from the source config

    Returns:
        RenderedMessage
    """
    info = format_build_info(build)
    text = resolve_text(params, build_dir)

    message = RenderedMessage(
        title=info.build_label,
        color=resolve_color(params),
        icon_url=PALETTE[params.alert_type][1],
        url=info.url,
        channel=params.channel or default_channel,
    )

    if params.mode == RenderMode.CONCISE:
        if text:
            message.title = text
    else:
        message.title = f"{info.build_label} - {params.alert_type.label}"
        message.text = text
        if params.mode == RenderMode.NORMAL_WITH_INFO:
            message.fields = [
                ("Job", info.job_label),
                ("Build", info.build_number_label),
            ]

    return message
