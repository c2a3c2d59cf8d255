"""Shared pytest fixtures for Concourse Slack notifier tests."""

import pytest
from unittest.mock import MagicMock


@pytest.fixture
def mock_concourse():
    """Create a mock Concourse API client."""
    from src.api.client import MockConcourseClient
    return MockConcourseClient()


@pytest.fixture
def build():
    """Coordinates of build #1 of pipeline/job on example.com."""
    from src.models.build import BuildCoordinates
    return BuildCoordinates(
        team_name="team",
        external_url="http://example.com",
        pipeline_name="pipeline",
        job_name="job",
        build_name="1",
    )


@pytest.fixture
def sample_instance_vars():
    """Instance vars with mixed value types."""
    return {"some_nested": {"json": "here"}, "num": 1, "foo": "bar"}


@pytest.fixture
def instanced_build(sample_instance_vars):
    """Same build as `build`, but on an instanced pipeline."""
    from src.models.build import BuildCoordinates
    return BuildCoordinates(
        team_name="team",
        external_url="http://example.com",
        pipeline_name="pipeline",
        instance_vars=sample_instance_vars,
        job_name="job",
        build_name="1",
    )


@pytest.fixture
def build_env():
    """Environment Concourse sets for a put step."""
    return {
        "BUILD_TEAM_NAME": "team",
        "BUILD_PIPELINE_NAME": "pipeline",
        "BUILD_JOB_NAME": "job",
        "BUILD_NAME": "5",
        "ATC_EXTERNAL_URL": "http://example.com/",
    }


def make_response(status_code=200, json_data=None, text="ok"):
    """Build a MagicMock standing in for requests.Response."""
    import requests

    response = MagicMock()
    response.status_code = status_code
    response.text = text
    if json_data is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = json_data
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Error")
    else:
        response.raise_for_status.return_value = None
    return response


@pytest.fixture
def response_factory():
    """Factory for fake HTTP responses."""
    return make_response
