"""Project identity resolution.

Turns partial input (explicit id, git remote, project directory) into exactly
one project id and one ref, or fails. Nothing is defaulted silently:
triggering a pipeline on the wrong project is worse than stopping.

Order for the project id (first success wins):
1. explicit id, used verbatim; git and the directory are not consulted;
2. URL of the configured git remote, looked up in the project directory;
3. otherwise `IdentityUnresolved`.

The ref is resolved independently: explicit ref, else the current branch.
"""

from __future__ import annotations

import logging
from typing import Callable

from core.domain.models import ResolvedTarget
from core.errors import GitContextError, IdentityUnresolved, InvalidRequest, MissingBranch
from core.interfaces.git_context import GitContextReader
from core.interfaces.project_lookup import ProjectLookup

logger = logging.getLogger(__name__)

# Called only when the directory is actually needed.
DirectoryLoader = Callable[[], ProjectLookup]


def resolve_project_id(
    *,
    explicit_project_id: int | None,
    remote_name: str,
    git: GitContextReader,
    directory_loader: DirectoryLoader,
) -> tuple[int, str | None]:
    """Return `(project_id, remote_url)`; `remote_url` is None for explicit ids."""

    if explicit_project_id is not None:
        if explicit_project_id <= 0:
            raise IdentityUnresolved(f"Project id must be a positive integer, got {explicit_project_id}")
        logger.info("Using explicit project id %s", explicit_project_id)
        return explicit_project_id, None

    try:
        remote_url = git.current_remote_url(remote_name)
    except GitContextError as exc:
        raise IdentityUnresolved(
            f"No project id given and the git remote {remote_name!r} could not be read: {exc}"
        ) from exc

    project_id = directory_loader().lookup(remote_url)
    if project_id is None:
        raise IdentityUnresolved(
            f"No project id given and {remote_url!r} (remote {remote_name!r}) is not in the project file; "
            "pass --id or add the URL to the project file"
        )

    logger.info("Project id %s found for %s", project_id, remote_url)
    return project_id, remote_url


def resolve_ref(
    *,
    explicit_ref: str | None,
    git: GitContextReader,
    explicit_project_id: int | None = None,
) -> str:
    # An explicit empty ref is an error, never a request for the current branch.
    if explicit_ref is not None:
        if not explicit_ref.strip():
            raise InvalidRequest("Pipeline ref must not be empty")
        return explicit_ref

    try:
        return git.current_branch()
    except GitContextError as exc:
        if explicit_project_id is not None:
            raise MissingBranch(
                f"Project id {explicit_project_id} was given without --branch "
                f"and the current branch cannot be determined: {exc}"
            ) from exc
        raise


def resolve_target(
    *,
    explicit_project_id: int | None,
    explicit_ref: str | None,
    remote_name: str,
    git: GitContextReader,
    directory_loader: DirectoryLoader,
) -> ResolvedTarget:
    """Resolve project id and ref for one invocation."""

    project_id, remote_url = resolve_project_id(
        explicit_project_id=explicit_project_id,
        remote_name=remote_name,
        git=git,
        directory_loader=directory_loader,
    )
    ref = resolve_ref(explicit_ref=explicit_ref, git=git, explicit_project_id=explicit_project_id)
    return ResolvedTarget(
        project_id=project_id,
        ref=ref,
        source="explicit" if explicit_project_id is not None else "directory",
        remote_url=remote_url,
    )
