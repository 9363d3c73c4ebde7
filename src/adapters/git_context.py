"""Git metadata helpers.

Reads the remote URL and the checked-out branch of a local repository by
shelling out to `git -C <repo>`. Nothing here writes to the repository.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

from core.errors import GitContextError

logger = logging.getLogger(__name__)

_BRANCH_PREFIX = "refs/heads/"


@dataclass(frozen=True)
class GitContext:
    """`GitContextReader` backed by the git CLI."""

    repo_path: Path = field(default_factory=Path.cwd)
    git_executable: str = "git"
    timeout_seconds: float = 10.0

    def _git(self, *args: str) -> subprocess.CompletedProcess[str]:
        cmd = [self.git_executable, "-C", str(self.repo_path), *args]
        logger.debug("Running %s", " ".join(cmd))
        try:
            return subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
                check=False,
            )
        except FileNotFoundError as exc:
            raise GitContextError(f"git executable not found: {self.git_executable}") from exc
        except subprocess.TimeoutExpired as exc:
            raise GitContextError(f"git timed out after {self.timeout_seconds}s: {' '.join(cmd)}") from exc

    def current_remote_url(self, remote_name: str) -> str:
        """Return the URL of `remote_name`.

        Fails if `repo_path` is not a repository or the remote is not defined.
        """

        res = self._git("config", "--get", f"remote.{remote_name}.url")
        url = (res.stdout or "").strip()
        if res.returncode != 0 or not url:
            stderr = (res.stderr or "").strip()
            detail = f": {stderr}" if stderr else ""
            raise GitContextError(
                f"Cannot read URL of git remote {remote_name!r} in {self.repo_path}{detail}"
            )
        logger.info("Git remote %s -> %s", remote_name, url)
        return url

    def current_branch(self) -> str:
        """Return the checked-out branch name (`refs/heads/` stripped).

        A detached HEAD or any ref outside `refs/heads/` is an error, never a
        guessed name.
        """

        res = self._git("symbolic-ref", "--quiet", "HEAD")
        ref = (res.stdout or "").strip()
        if res.returncode != 0 or not ref:
            raise GitContextError(
                f"Cannot determine current branch in {self.repo_path} (detached HEAD or not a git repository)"
            )
        branch = branch_from_ref(ref)
        logger.info("Git branch -> %s", branch)
        return branch


def branch_from_ref(ref: str) -> str:
    """`refs/heads/feature/x` -> `feature/x`."""

    if not ref.startswith(_BRANCH_PREFIX):
        raise GitContextError(f"Unexpected HEAD reference {ref!r}")
    branch = ref[len(_BRANCH_PREFIX):]
    if not branch or branch.endswith("/"):
        raise GitContextError(f"Unexpected HEAD reference {ref!r}")
    return branch
