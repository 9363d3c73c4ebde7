"""Project directory: repository URL -> GitLab project id.

Supported JSON shapes:
- Mapping:        {"git@gitlab.com:group/app.git": 42, ...}
- GitLab export:  [{"id": 42, "ssh_url_to_repo": "...", "http_url_to_repo": "..."}, ...]
                  (the output of `GET /api/v4/projects`)
- Explicit list:  [{"repository_url": "...", "id": 42}, ...]

Matching is exact string equality. `git@host:g/p.git`, `https://host/g/p.git`
and `https://host/g/p.git/` are three different keys; list every form you use.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterator, Mapping

from pydantic import ValidationError

from core.domain.models import Project
from core.errors import ProjectDirectoryNotFound, ProjectDirectoryParseError

logger = logging.getLogger(__name__)

_GITLAB_URL_FIELDS = ("ssh_url_to_repo", "http_url_to_repo", "web_url")


class ProjectDirectory:
    """Immutable lookup table built once per invocation."""

    def __init__(self, projects: Mapping[str, int] | None = None) -> None:
        self._by_url: dict[str, int] = dict(projects or {})

    @classmethod
    def empty(cls) -> "ProjectDirectory":
        return cls()

    @classmethod
    def from_projects(cls, projects: list[Project]) -> "ProjectDirectory":
        """Build the table; on duplicate URLs the last entry wins."""

        by_url: dict[str, int] = {}
        for project in projects:
            previous = by_url.get(project.repository_url)
            if previous is not None and previous != project.id:
                logger.warning(
                    "Duplicate repository URL %s in project file (id %s replaced by %s)",
                    project.repository_url,
                    previous,
                    project.id,
                )
            by_url[project.repository_url] = project.id
        return cls(by_url)

    def lookup(self, url: str) -> int | None:
        return self._by_url.get(url)

    def __len__(self) -> int:
        return len(self._by_url)

    def __iter__(self) -> Iterator[Project]:
        for url, project_id in self._by_url.items():
            yield Project(repository_url=url, id=project_id)

    def __contains__(self, url: object) -> bool:
        return url in self._by_url


def _projects_from_mapping(data: dict[str, Any]) -> list[Project]:
    return [Project(repository_url=url, id=project_id) for url, project_id in data.items()]


def _projects_from_records(records: list[Any]) -> list[Project]:
    projects: list[Project] = []
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise ValueError(f"entry #{index} is not an object")
        if "repository_url" in record:
            projects.append(Project(repository_url=record["repository_url"], id=record.get("id")))
            continue

        urls = [record[field] for field in _GITLAB_URL_FIELDS if record.get(field)]
        if not urls:
            raise ValueError(f"entry #{index} has no repository URL")
        projects.extend(Project(repository_url=url, id=record.get("id")) for url in urls)
    return projects


def parse_project_directory(data: Any) -> ProjectDirectory:
    """Validate decoded JSON and build the directory (raises ValueError/ValidationError)."""

    if isinstance(data, dict):
        projects = _projects_from_mapping(data)
    elif isinstance(data, list):
        projects = _projects_from_records(data)
    else:
        raise ValueError(f"expected a JSON object or array, got {type(data).__name__}")
    return ProjectDirectory.from_projects(projects)


def load_project_directory(path: Path) -> ProjectDirectory:
    """Load the project file.

    Raises:
        ProjectDirectoryNotFound: the file does not exist (callers may go on
            with `ProjectDirectory.empty()`).
        ProjectDirectoryParseError: the file exists but cannot be used.
    """

    if not path.exists():
        raise ProjectDirectoryNotFound(path)

    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ProjectDirectoryParseError(path, f"cannot read file ({exc})") from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ProjectDirectoryParseError(path, f"not valid JSON ({exc})") from exc

    try:
        directory = parse_project_directory(data)
    except ValidationError as exc:
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'entry'}: {err['msg']}" for err in exc.errors()
        )
        raise ProjectDirectoryParseError(path, errors) from exc
    except ValueError as exc:
        raise ProjectDirectoryParseError(path, str(exc)) from exc

    logger.info("Loaded %d repository URLs from %s", len(directory), path)
    return directory
