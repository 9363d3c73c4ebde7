import json

import httpx
import pytest

from adapters.gitlab_client import GitLabPipelineClient, decode_pipeline
from core.domain.models import NotExecuted, PipelineRequest, PipelineResult, PipelineVariable
from core.errors import ApiError, DecodeError, TransportError

from conftest import PIPELINE_RESPONSE


class Recorder:
    """MockTransport handler returning a canned response and keeping requests."""

    def __init__(self, status_code=201, body=None, content=None, exc=None):
        self.status_code = status_code
        self.body = body
        self.content = content
        self.exc = exc
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        if self.content is not None:
            return httpx.Response(self.status_code, content=self.content)
        return httpx.Response(self.status_code, json=self.body)


@pytest.fixture
def request_body():
    return PipelineRequest(
        ref="main",
        variables=[PipelineVariable(key="FOO", value="bar"), PipelineVariable(key="BAZ", value="qux=1")],
    )


def make_client(settings, handler, base_url="https://gitlab.example.com/"):
    return GitLabPipelineClient(
        base_url,
        "glpat-secret-token",
        settings=settings,
        transport=httpx.MockTransport(handler),
    )


class TestTrigger:
    def test_success_posts_json_with_bearer_token(self, settings, request_body):
        handler = Recorder(201, PIPELINE_RESPONSE)
        client = make_client(settings, handler)

        result = client.trigger(42, request_body)

        assert isinstance(result, PipelineResult)
        assert result.id == 1234
        assert result.status == "created"
        assert result.detailed_status.text == "pending"
        assert result.web_url.endswith("/pipelines/1234")

        assert len(handler.requests) == 1
        sent = handler.requests[0]
        assert sent.method == "POST"
        assert str(sent.url) == "https://gitlab.example.com/api/v4/projects/42/pipeline"
        assert sent.headers["Authorization"] == "Bearer glpat-secret-token"
        assert sent.headers["Content-Type"] == "application/json"
        assert json.loads(sent.content) == {
            "ref": "main",
            "variables": [{"key": "FOO", "value": "bar"}, {"key": "BAZ", "value": "qux=1"}],
        }

    def test_forbidden_is_api_error_without_retry(self, settings, request_body):
        body = {"message": "403 Forbidden"}
        handler = Recorder(403, body)
        client = make_client(settings, handler)

        with pytest.raises(ApiError) as excinfo:
            client.trigger(42, request_body)

        assert excinfo.value.status_code == 403
        assert json.loads(excinfo.value.body) == body
        assert len(handler.requests) == 1

    def test_validation_error_body_is_kept_verbatim(self, settings, request_body):
        raw = b'{"message":{"base":["Reference not found"]}}'
        client = make_client(settings, Recorder(400, content=raw))

        with pytest.raises(ApiError) as excinfo:
            client.trigger(42, request_body)
        assert excinfo.value.body == raw.decode()

    def test_transport_failure(self, settings, request_body):
        handler = Recorder(exc=httpx.ConnectError("connection refused"))
        client = make_client(settings, handler)

        with pytest.raises(TransportError, match="connection refused"):
            client.trigger(42, request_body)
        assert len(handler.requests) == 1

    def test_timeout_is_transport_error(self, settings, request_body):
        client = make_client(settings, Recorder(exc=httpx.ReadTimeout("timed out")))
        with pytest.raises(TransportError):
            client.trigger(42, request_body)

    def test_non_json_success_is_decode_error_with_body(self, settings, request_body):
        client = make_client(settings, Recorder(201, content=b"<html>maintenance</html>"))

        with pytest.raises(DecodeError) as excinfo:
            client.trigger(42, request_body)
        assert excinfo.value.body == "<html>maintenance</html>"

    def test_dry_run_sends_nothing(self, settings, request_body):
        handler = Recorder(201, PIPELINE_RESPONSE)
        client = make_client(settings, handler)

        outcome = client.trigger(42, request_body, dry_run=True)

        assert isinstance(outcome, NotExecuted)
        assert outcome.prepared.url == "https://gitlab.example.com/api/v4/projects/42/pipeline"
        assert json.loads(outcome.prepared.body)["variables"][1] == {"key": "BAZ", "value": "qux=1"}
        assert handler.requests == []


class TestPrepare:
    def test_body_is_exactly_what_is_sent(self, settings, request_body):
        handler = Recorder(201, PIPELINE_RESPONSE)
        client = make_client(settings, handler)

        prepared = client.prepare(7, request_body)
        client.trigger(7, request_body)

        assert handler.requests[0].content.decode() == prepared.body

    def test_auth_header_is_bearer_token(self, settings):
        client = make_client(settings, Recorder())
        assert client.auth_headers() == {"Authorization": "Bearer glpat-secret-token"}

    def test_timeout_comes_from_settings(self, settings, request_body, monkeypatch):
        seen = {}
        handler = Recorder(201, PIPELINE_RESPONSE)

        def fake_build_client(settings=None, *, timeout_seconds=None, extra_headers=None, transport=None):
            seen["timeout_seconds"] = timeout_seconds
            return httpx.Client(transport=httpx.MockTransport(handler))

        monkeypatch.setattr("adapters.gitlab_client.build_client", fake_build_client)
        tuned = settings.model_copy(update={"http_timeout_seconds": 12.5})
        client = GitLabPipelineClient("https://gitlab.example.com", "t", settings=tuned)

        client.trigger(42, request_body)

        assert seen["timeout_seconds"] == 12.5


class TestDecodePipeline:
    def test_partial_payload_uses_zero_values(self):
        result = decode_pipeline('{"id": 5, "status": "pending", "unknown_field": {"x": 1}}')

        assert result.id == 5
        assert result.ref == ""
        assert result.web_url == ""
        assert result.duration is None
        assert result.detailed_status.text == ""

    def test_nulls_in_text_fields(self):
        result = decode_pipeline('{"id": 5, "sha": null, "detailed_status": null}')
        assert result.sha == ""
        assert result.detailed_status.group == ""

    def test_nulls_in_number_and_flag_fields(self):
        result = decode_pipeline(
            '{"id": 5, "iid": null, "project_id": null, "tag": null, "detailed_status": {"has_details": null}}'
        )
        assert result.id == 5
        assert result.iid == 0
        assert result.project_id == 0
        assert result.tag is False
        assert result.detailed_status.has_details is False

    @pytest.mark.parametrize("body", ["[]", '"created"', '{"id": "not-a-number"}', ""])
    def test_unexpected_shapes(self, body):
        with pytest.raises(DecodeError) as excinfo:
            decode_pipeline(body)
        assert excinfo.value.body == body
