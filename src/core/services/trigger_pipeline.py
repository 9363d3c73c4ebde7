"""Pipeline trigger orchestration.

The CLI delegates the whole flow to `trigger()`: parse variables, resolve the
target, build the request, call GitLab. Printing stays in the CLI; this module
only reports progress through `TriggerHooks`, so it is reusable from tests or
other entry-points.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Sequence

from adapters.credentials import read_token
from adapters.git_context import GitContext
from adapters.gitlab_client import GitLabPipelineClient
from adapters.project_directory import ProjectDirectory, load_project_directory
from core.config import AppSettings
from core.domain.models import (
    NotExecuted,
    PipelineRequest,
    PipelineResult,
    PreparedTrigger,
    ResolvedTarget,
)
from core.errors import ProjectDirectoryNotFound
from core.interfaces.git_context import GitContextReader
from core.services.identity import resolve_target
from core.services.request_builder import build_pipeline_request, parse_variables

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str, str], GitLabPipelineClient]


@dataclass
class TriggerOptions:
    """Per-invocation parameters. `None` falls back to `AppSettings`."""

    project_id: int | None = None
    ref: str | None = None
    variables: Sequence[str] = ()
    gitlab_url: str | None = None
    token_file: Path | None = None
    project_file: Path | None = None
    remote_name: str | None = None
    repo_path: Path | None = None
    timeout_seconds: float | None = None
    dry_run: bool = False


@dataclass
class TriggerHooks:
    """Optional callbacks for UI layers."""

    warning: Callable[[str], None] | None = None
    resolved: Callable[[ResolvedTarget], None] | None = None
    prepared: Callable[[PreparedTrigger], None] | None = None


@dataclass
class TriggerReport:
    """Output of one invocation."""

    target: ResolvedTarget
    request: PipelineRequest
    prepared: PreparedTrigger
    result: PipelineResult | None
    warnings: list[str] = field(default_factory=list)

    @property
    def executed(self) -> bool:
        return self.result is not None


def _directory_loader(
    path: Path,
    warnings: list[str],
    hooks: TriggerHooks,
) -> Callable[[], ProjectDirectory]:
    def load() -> ProjectDirectory:
        try:
            return load_project_directory(path)
        except ProjectDirectoryNotFound as exc:
            message = f"{exc}; continuing with an empty project directory."
            logger.info("%s", message)
            warnings.append(message)
            if hooks.warning:
                hooks.warning(message)
            return ProjectDirectory.empty()

    return load


def _default_client_factory(settings: AppSettings, timeout_seconds: float | None) -> ClientFactory:
    def build(base_url: str, token: str) -> GitLabPipelineClient:
        return GitLabPipelineClient(base_url, token, settings=settings, timeout_seconds=timeout_seconds)

    return build


def trigger(
    *,
    settings: AppSettings,
    options: TriggerOptions,
    git: GitContextReader | None = None,
    client_factory: ClientFactory | None = None,
    hooks: TriggerHooks | None = None,
) -> TriggerReport:
    hooks = hooks or TriggerHooks()
    warnings: list[str] = []

    # Syntax errors are reported before any git, file or network access.
    parse_variables(options.variables)

    if git is None:
        git = GitContext(repo_path=options.repo_path or Path.cwd())

    remote_name = options.remote_name or settings.remote_name
    project_file = options.project_file or settings.project_file
    gitlab_url = options.gitlab_url or settings.gitlab_url

    target = resolve_target(
        explicit_project_id=options.project_id,
        explicit_ref=options.ref,
        remote_name=remote_name,
        git=git,
        directory_loader=_directory_loader(project_file, warnings, hooks),
    )
    if hooks.resolved:
        hooks.resolved(target)

    request = build_pipeline_request(target.ref, options.variables)

    # The token is only needed when the request is really sent.
    token = "" if options.dry_run else read_token(options.token_file or settings.token_file)

    factory = client_factory or _default_client_factory(settings, options.timeout_seconds)
    client = factory(gitlab_url, token)
    prepared = client.prepare(target.project_id, request)
    if hooks.prepared:
        hooks.prepared(prepared)

    outcome = client.trigger(target.project_id, request, dry_run=options.dry_run)
    result = None if isinstance(outcome, NotExecuted) else outcome
    if result is not None:
        logger.info("Pipeline %s created (%s): %s", result.id, result.status, result.web_url)

    return TriggerReport(
        target=target,
        request=request,
        prepared=prepared,
        result=result,
        warnings=warnings,
    )
