"""GitLab pipeline-creation client.

Only one endpoint is used: `POST /api/v4/projects/:id/pipeline`.

Error policy:
- No response at all (DNS, TLS, timeout) -> `TransportError`.
- Non-2xx -> `ApiError` with the raw body, so GitLab's own validation
  message ("Reference not found", "403 Forbidden") reaches the user.
- 2xx that is not a pipeline object -> `DecodeError`, raw body kept.
Nothing is retried: each successful POST creates a new pipeline.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx
from pydantic import ValidationError

from adapters.http_client import build_client
from core.config import AppSettings
from core.domain.models import NotExecuted, PipelineRequest, PipelineResult, PreparedTrigger
from core.errors import ApiError, DecodeError, TransportError

logger = logging.getLogger(__name__)


class GitLabPipelineClient:
    def __init__(
        self,
        base_url: str,
        token: str,
        *,
        settings: AppSettings | None = None,
        timeout_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._settings = settings or AppSettings()
        self._timeout_seconds = timeout_seconds or self._settings.http_timeout_seconds
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    def pipeline_url(self, project_id: int) -> str:
        return f"{self._base_url}/api/v4/projects/{project_id}/pipeline"

    def auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._token}"}

    def prepare(self, project_id: int, request: PipelineRequest) -> PreparedTrigger:
        """Compute the exact URL and JSON body without touching the network."""

        body = json.dumps(request.to_wire(), ensure_ascii=False)
        return PreparedTrigger(url=self.pipeline_url(project_id), body=body)

    def trigger(
        self,
        project_id: int,
        request: PipelineRequest,
        *,
        dry_run: bool = False,
    ) -> PipelineResult | NotExecuted:
        prepared = self.prepare(project_id, request)
        logger.info("%s %s", prepared.method, prepared.url)
        logger.debug("Request body: %s", prepared.body)

        if dry_run:
            logger.info("Dry-run: request not sent")
            return NotExecuted(prepared=prepared)

        return self._send(prepared)

    def _send(self, prepared: PreparedTrigger) -> PipelineResult:
        headers = {**self.auth_headers(), "Content-Type": "application/json"}
        try:
            with build_client(
                self._settings,
                timeout_seconds=self._timeout_seconds,
                transport=self._transport,
            ) as client:
                response = client.post(prepared.url, content=prepared.body.encode("utf-8"), headers=headers)
        except httpx.TransportError as exc:
            raise TransportError(f"Request to {prepared.url} failed: {exc}") from exc

        logger.info("GitLab answered HTTP %s", response.status_code)
        body = response.text
        if not response.is_success:
            raise ApiError(response.status_code, body)

        return decode_pipeline(body)


def decode_pipeline(body: str) -> PipelineResult:
    """Parse a pipeline creation response (unknown fields ignored)."""

    try:
        payload: Any = json.loads(body)
    except json.JSONDecodeError as exc:
        raise DecodeError("body is not valid JSON", body) from exc

    if not isinstance(payload, dict):
        raise DecodeError(f"expected a JSON object, got {type(payload).__name__}", body)

    try:
        return PipelineResult.model_validate(payload)
    except ValidationError as exc:
        raise DecodeError(f"unexpected pipeline shape ({exc.error_count()} errors)", body) from exc
