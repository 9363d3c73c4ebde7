"""Domain models (Pydantic v2).

Why Pydantic in the domain:
- Strict validation and self-documenting fields (Field) without coupling the
  core to I/O libraries.
- Forward-compatible decoding of GitLab payloads: unknown keys are ignored,
  missing keys fall back to zero values.

Note:
- These models describe *what* the data is, not *how* it is obtained.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict


def _null_to_empty(value: Any) -> Any:
    # GitLab sends `null` for text fields it has not filled yet.
    return "" if value is None else value


class Project(BaseModel):
    """One entry of the project directory."""

    model_config = ConfigDict(frozen=True)

    repository_url: str = Field(
        ...,
        min_length=1,
        description="Repository URL exactly as `git remote` reports it.",
    )
    id: int = Field(
        ...,
        gt=0,
        description="GitLab numeric project id.",
    )


class PipelineVariable(BaseModel):
    """A `KEY=VALUE` pair passed to the pipeline."""

    key: str = Field(..., min_length=1)
    value: str = Field(default="")


class PipelineRequest(BaseModel):
    """Body of `POST /projects/:id/pipeline`.

    Variable order is kept as given; GitLab does not depend on it, but it makes
    the printed body match the command line.
    """

    ref: str = Field(..., min_length=1, description="Branch, tag or commit-ish.")
    variables: list[PipelineVariable] = Field(default_factory=list)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class DetailedStatus(BaseModel):
    model_config = ConfigDict(extra="ignore")

    icon: str = ""
    text: str = ""
    label: str = ""
    group: str = ""
    tooltip: str = ""
    has_details: bool = False
    details_path: str = ""
    favicon: str = ""

    @field_validator(
        "icon", "text", "label", "group", "tooltip", "details_path", "favicon", mode="before"
    )
    @classmethod
    def empty_text(cls, value: Any) -> Any:
        return _null_to_empty(value)

    @field_validator("has_details", mode="before")
    @classmethod
    def null_flag(cls, value: Any) -> Any:
        return False if value is None else value


class PipelineUser(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int = 0
    username: str = ""
    name: str = ""
    web_url: str = ""


class PipelineResult(BaseModel):
    """Pipeline as returned by GitLab after creation.

    Every field has a zero value so partially populated responses still decode.
    """

    model_config = ConfigDict(extra="ignore")

    id: int = 0
    iid: int = 0
    project_id: int = 0
    sha: str = ""
    before_sha: str = ""
    ref: str = ""
    tag: bool = False
    status: str = ""
    source: str = ""
    web_url: str = ""
    yaml_errors: str | None = None
    user: PipelineUser | None = None
    created_at: str | None = None
    updated_at: str | None = None
    started_at: str | None = None
    finished_at: str | None = None
    committed_at: str | None = None
    duration: float | None = None
    queued_duration: float | None = None
    coverage: str | float | None = None
    detailed_status: DetailedStatus = Field(default_factory=DetailedStatus)

    @field_validator("sha", "before_sha", "ref", "status", "source", "web_url", mode="before")
    @classmethod
    def empty_text(cls, value: Any) -> Any:
        return _null_to_empty(value)

    @field_validator("detailed_status", mode="before")
    @classmethod
    def null_status(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("id", "iid", "project_id", mode="before")
    @classmethod
    def null_number(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("tag", mode="before")
    @classmethod
    def null_flag(cls, value: Any) -> Any:
        return False if value is None else value


class PreparedTrigger(BaseModel):
    """The exact HTTP request the client sends (or would send in dry-run)."""

    model_config = ConfigDict(frozen=True)

    method: Literal["POST"] = "POST"
    url: str
    body: str


class NotExecuted(BaseModel):
    """Dry-run result: the request was computed but never sent."""

    model_config = ConfigDict(frozen=True)

    prepared: PreparedTrigger


class ResolvedTarget(BaseModel):
    """Project id and ref chosen for one invocation. Never persisted."""

    model_config = ConfigDict(frozen=True)

    project_id: int = Field(..., gt=0)
    ref: str = Field(..., min_length=1)
    source: Literal["explicit", "directory"] = Field(
        ...,
        description="Where the project id came from.",
    )
    remote_url: str | None = Field(
        default=None,
        description="Remote URL used for the directory lookup, if any.",
    )
