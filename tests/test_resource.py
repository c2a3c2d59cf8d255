"""Tests for the check/in/out orchestration (resource.py)."""

import pytest
from unittest.mock import MagicMock, patch

from src.config import HTTPConfig
from src.models.outcome import BuildStatus
from src.notify.message import MessageFileError
from src.resource import (
    MISSING_SOURCE_ERROR,
    InRequest,
    OutRequest,
    SlackResource,
)

SOURCE = {"url": "https://hooks.slack.com/services/x", "channel": "#builds"}


@pytest.fixture
def resource(build_env):
    return SlackResource(environ=build_env, http_config=HTTPConfig(timeout=2))


@pytest.fixture
def notifier():
    with patch("src.resource.SlackNotifier") as notifier_cls:
        notifier_cls.return_value.send.return_value = None
        yield notifier_cls


class TestCheckAndIn:
    def test_check_is_empty(self, resource):
        assert resource.check(SOURCE, None) == []

    def test_in_echoes_version(self, resource, tmp_path):
        output = resource.in_(InRequest(source=SOURCE, version={"ref": "sent"}), str(tmp_path))
        assert output.to_dict() == {"version": {"ref": "sent"}, "metadata": []}

    def test_in_without_version(self, resource, tmp_path):
        output = resource.in_(InRequest(source=SOURCE), str(tmp_path))
        assert output.version == {"ref": "none"}


class TestOut:
    def test_missing_source(self, resource, tmp_path, notifier):
        output = resource.out(OutRequest(params={}), str(tmp_path))

        assert output.version == {"ref": f"not sent: {MISSING_SOURCE_ERROR}"}
        assert {"name": "sent", "value": "false"} in output.metadata
        assert {"name": "error", "value": MISSING_SOURCE_ERROR} in output.metadata
        notifier.assert_not_called()

    def test_invalid_params(self, resource, tmp_path, notifier):
        outcome = resource.notify(OutRequest(source=SOURCE, params={"mode": "loud"}), str(tmp_path))

        assert not outcome.sent
        assert "mode" in outcome.error
        notifier.assert_not_called()

    def test_sends_message(self, resource, tmp_path, notifier):
        output = resource.out(
            OutRequest(source=SOURCE, params={"alert_type": "success", "message": "yay"}),
            str(tmp_path),
        )

        assert output.version == {"ref": "sent to #builds"}
        notifier.assert_called_once_with(SOURCE["url"], timeout=2)
        payload = notifier.return_value.send.call_args[0][0]
        assert payload["channel"] == "#builds"
        attachment = payload["attachments"][0]
        assert attachment["author_name"] == "pipeline/job #5 - Success"
        assert attachment["text"] == "yay"
        assert attachment["footer"] == "http://example.com/teams/team/pipelines/pipeline/jobs/job/builds/5"

    def test_channel_param_override(self, resource, tmp_path, notifier):
        outcome = resource.notify(OutRequest(source=SOURCE, params={"channel": "#other"}),
                                  str(tmp_path))
        assert outcome.channel == "#other"
        assert notifier.return_value.send.call_args[0][0]["channel"] == "#other"

    def test_delivery_failure(self, resource, tmp_path, notifier):
        notifier.return_value.send.return_value = "500 Server Error"

        outcome = resource.notify(OutRequest(source=SOURCE, params={}), str(tmp_path))

        assert not outcome.sent
        assert outcome.error == "500 Server Error"

    def test_unparsable_webhook_url(self, resource, tmp_path):
        outcome = resource.notify(OutRequest(source={"url": "::not a url::"}, params={}),
                                  str(tmp_path))

        assert outcome.sent is False
        assert outcome.error

    @pytest.mark.parametrize("source_disabled,params_disabled", [(True, False), (False, True)])
    def test_disabled(self, resource, tmp_path, notifier, source_disabled, params_disabled):
        source = dict(SOURCE, disabled=source_disabled)
        outcome = resource.notify(
            OutRequest(source=source, params={"disabled": params_disabled}), str(tmp_path)
        )

        assert not outcome.sent
        assert outcome.error is None
        notifier.assert_not_called()

    def test_missing_message_file_raises(self, resource, tmp_path, notifier):
        params = {"message_file": "nope.txt", "fail_if_message_file_missing": True}
        with pytest.raises(MessageFileError):
            resource.out(OutRequest(source=SOURCE, params=params), str(tmp_path))

    @patch("src.resource.ProductionConcourseClient")
    def test_broke_checks_previous_build(self, client_cls, resource, tmp_path, notifier):
        client = client_cls.return_value
        client.fetch_build_status.return_value = BuildStatus.SUCCEEDED
        source = dict(SOURCE, username="admin", password="secret",
                      concourse_url="https://ci.internal/")

        outcome = resource.notify(OutRequest(source=source, params={"alert_type": "broke"}),
                                  str(tmp_path))

        assert outcome.sent
        assert client_cls.call_args[0][0] == "https://ci.internal"
        client.authenticate.assert_called_once_with("admin", "secret")
        client.fetch_build_status.assert_called_once_with("team", "pipeline", None, "job", 4)

    @patch("src.resource.ProductionConcourseClient")
    def test_fixed_skipped_when_status_unknown(self, client_cls, resource, tmp_path, notifier):
        client_cls.return_value.fetch_build_status.return_value = None

        outcome = resource.notify(OutRequest(source=SOURCE, params={"alert_type": "fixed"}),
                                  str(tmp_path))

        assert not outcome.sent
        assert outcome.summary == "not sent"
        client_cls.return_value.authenticate.assert_not_called()
        notifier.assert_not_called()

    @patch("src.resource.ProductionConcourseClient")
    def test_concourse_client_closed(self, client_cls, resource, tmp_path, notifier):
        client_cls.return_value.fetch_build_status.return_value = BuildStatus.FAILED

        resource.notify(OutRequest(source=SOURCE, params={"alert_type": "fixed"}), str(tmp_path))

        client_cls.return_value.close.assert_called_once()

    @patch("src.resource.ProductionConcourseClient")
    def test_concourse_client_closed_on_error(self, client_cls, resource, tmp_path, notifier):
        client_cls.return_value.fetch_build_status.side_effect = RuntimeError("boom")

        with pytest.raises(RuntimeError):
            resource.notify(OutRequest(source=SOURCE, params={"alert_type": "broke"}),
                            str(tmp_path))

        client_cls.return_value.close.assert_called_once()

    def test_numeric_color_param(self, resource, tmp_path, notifier):
        outcome = resource.notify(OutRequest(source=SOURCE, params={"color": 112233}),
                                  str(tmp_path))

        assert outcome.sent
        attachment = notifier.return_value.send.call_args[0][0]["attachments"][0]
        assert attachment["color"] == "#112233"

    def test_structured_message_file_param(self, resource, tmp_path, notifier):
        outcome = resource.notify(OutRequest(source=SOURCE, params={"message_file": {"a": 1}}),
                                  str(tmp_path))

        assert not outcome.sent
        assert "message_file" in outcome.error
        notifier.assert_not_called()
