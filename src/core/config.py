"""Core configuration.

Why here:
- Centralizes environment variables (pydantic-settings) without polluting the CLI.
- Lets adapters (git/HTTP) read the same defaults consistently.

Every field can be overridden by a `GLCLI_*` environment variable, a project
`.env`, the per-user `.env`, and finally by CLI flags.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "glpipeline"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "glpipeline"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "glpipeline"
    return Path.home() / ".config" / "glpipeline"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str | None], env_path: Path | None = None) -> Path:
    """Write/update variables in the user's global .env.

    Keys already present are kept unless overridden; `None` values are skipped.
    """

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# glpipeline user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Central application settings.

    Why pydantic-settings:
    - Typed + validated at the edge (env vars) without leaking into the core.
    - A single configuration contract shared by the CLI and the adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="GLCLI_",
        extra="ignore",
        case_sensitive=False,
        # Order: project first (dev), then the user's global config.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    gitlab_url: str = Field(
        default="https://gitlab.com",
        min_length=8,
        description="Base URL of the GitLab instance.",
    )
    token_file: Path = Field(
        default_factory=lambda: Path.home() / ".gitlab.token",
        description="File holding the API token (single line).",
    )
    project_file: Path = Field(
        default_factory=lambda: Path.home() / ".gitlab-projects.json",
        description="JSON file mapping repository URLs to project ids.",
    )
    remote_name: str = Field(
        default="origin",
        min_length=1,
        description="Git remote used to identify the current project.",
    )

    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for the pipeline request (seconds).",
    )
    user_agent: str = Field(
        default="glpipeline/0.1",
        min_length=1,
        description="User-Agent sent to the GitLab API.",
    )
