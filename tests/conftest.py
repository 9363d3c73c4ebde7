import json
import shutil
import subprocess
from pathlib import Path

import pytest

from core.config import AppSettings
from core.errors import GitContextError


PIPELINE_RESPONSE = {
    "id": 1234,
    "iid": 56,
    "project_id": 42,
    "sha": "a91957a858320c0e17f3a0eca7cfacbff50ea29a",
    "ref": "main",
    "status": "created",
    "source": "api",
    "created_at": "2026-10-19T10:00:00.000Z",
    "updated_at": "2026-10-19T10:00:00.000Z",
    "web_url": "https://gitlab.example.com/g/p/-/pipelines/1234",
    "before_sha": "0000000000000000000000000000000000000000",
    "tag": False,
    "yaml_errors": None,
    "user": {"id": 1, "username": "root", "name": "Administrator"},
    "started_at": None,
    "finished_at": None,
    "committed_at": None,
    "duration": None,
    "queued_duration": None,
    "coverage": None,
    "detailed_status": {
        "icon": "status_pending",
        "text": "pending",
        "label": "pending",
        "group": "pending",
        "tooltip": "pending",
        "has_details": False,
        "details_path": "/g/p/-/pipelines/1234",
        "illustration": None,
        "favicon": "/assets/ci_favicons/favicon_status_pending.png",
    },
}


class FakeGit:
    """In-memory `GitContextReader` that records every call."""

    def __init__(self, remotes=None, branch=None):
        self.remotes = dict(remotes or {})
        self.branch = branch
        self.calls = []

    def current_remote_url(self, remote_name):
        self.calls.append(("remote", remote_name))
        if remote_name not in self.remotes:
            raise GitContextError(f"remote {remote_name!r} not defined")
        return self.remotes[remote_name]

    def current_branch(self):
        self.calls.append(("branch",))
        if self.branch is None:
            raise GitContextError("detached HEAD")
        return self.branch


@pytest.fixture
def fake_git():
    return FakeGit(remotes={"origin": "git@host:g/p.git"}, branch="main")


@pytest.fixture
def project_file(tmp_path):
    path = tmp_path / "projects.json"
    path.write_text(json.dumps({"git@host:g/p.git": 42}), encoding="utf-8")
    return path


@pytest.fixture
def token_file(tmp_path):
    path = tmp_path / "gitlab.token"
    path.write_text("  glpat-abcdefghijklmnop\n", encoding="utf-8")
    return path


@pytest.fixture
def settings(tmp_path, project_file, token_file):
    return AppSettings(
        _env_file=None,
        gitlab_url="https://gitlab.example.com",
        token_file=token_file,
        project_file=project_file,
    )


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """No GLCLI_* variables and no project `.env` leak into the test."""

    for name in ("GLCLI_GITLAB_URL", "GLCLI_TOKEN_FILE", "GLCLI_PROJECT_FILE", "GLCLI_REMOTE_NAME",
                 "GLCLI_HTTP_TIMEOUT_SECONDS", "GLCLI_USER_AGENT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def make_repo(path: Path, *, branch="main", remotes=None) -> Path:
    """Create an empty repository with HEAD on `branch` (no commit needed)."""

    path.mkdir(parents=True, exist_ok=True)
    subprocess.run(["git", "init", "-q", str(path)], check=True)
    subprocess.run(["git", "-C", str(path), "symbolic-ref", "HEAD", f"refs/heads/{branch}"], check=True)
    for name, url in (remotes or {}).items():
        subprocess.run(["git", "-C", str(path), "remote", "add", name, url], check=True)
    return path
