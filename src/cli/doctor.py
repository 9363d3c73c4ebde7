"""Doctor command for environment diagnostics."""

from __future__ import annotations

from pathlib import Path

import httpx
import typer
from rich.console import Console
from rich.table import Table

from adapters.credentials import mask_token, read_token
from adapters.git_context import GitContext
from adapters.http_client import build_client
from adapters.project_directory import ProjectDirectory, load_project_directory
from core.config import AppSettings, get_user_env_file, write_user_env_vars
from core.errors import GitContextError, GlPipelineError, ProjectDirectoryNotFound

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


def _check_http(settings: AppSettings) -> tuple[bool, str]:
    url = f"{settings.gitlab_url.rstrip('/')}/api/v4/version"
    try:
        with build_client(settings) as client:
            response = client.get(url)
    except httpx.HTTPError as exc:
        return False, str(exc)
    # 401 still proves the API is there; the token is not sent here.
    return response.status_code < 500, f"HTTP {response.status_code} from {url}"


def _check_token(path: Path) -> tuple[str, str]:
    try:
        token = read_token(path)
    except GlPipelineError as exc:
        return "FAIL", str(exc)
    return "OK", f"{path} ({mask_token(token)})"


def _check_project_file(path: Path) -> tuple[str, str, ProjectDirectory | None]:
    try:
        directory = load_project_directory(path)
    except ProjectDirectoryNotFound:
        return "OPTIONAL", f"{path} not found -> --id is required", None
    except GlPipelineError as exc:
        return "FAIL", str(exc), None
    return "OK", f"{path} ({len(directory)} repository URLs)", directory


@app.command()
def run(
    repo: Path = typer.Option(Path("."), "--repo", help="Repository directory to inspect."),
) -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()
    git = GitContext(repo_path=repo)

    table = Table(title="glpipeline Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    table.add_row("GitLab URL", "OK", settings.gitlab_url)
    table.add_row("Token file", *_check_token(settings.token_file))
    project_status, project_detail, directory = _check_project_file(settings.project_file)
    table.add_row("Project file", project_status, project_detail)

    # Git context
    remote_url: str | None = None
    try:
        remote_url = git.current_remote_url(settings.remote_name)
        table.add_row(f"Git remote ({settings.remote_name})", "OK", remote_url)
    except GitContextError as exc:
        table.add_row(f"Git remote ({settings.remote_name})", "FAIL", str(exc))
    try:
        table.add_row("Git branch", "OK", git.current_branch())
    except GitContextError as exc:
        table.add_row("Git branch", "FAIL", str(exc))

    if remote_url and directory is not None:
        project_id = directory.lookup(remote_url)
        if project_id is None:
            table.add_row("Project id", "FAIL", f"{remote_url} is not in the project file")
        else:
            table.add_row("Project id", "OK", str(project_id))

    # Connectivity (best-effort)
    ok_http, detail_http = _check_http(settings)
    table.add_row("HTTP connectivity", "OK" if ok_http else "FAIL", detail_http)

    _console.print(table)

    if project_status != "OK":
        _console.print(
            "\n[yellow]Note:[/yellow] Without a project file, pass `--id` and `--branch` to `glpipeline run`."
        )


@app.command(name="setup")
def setup() -> None:
    """Interactive setup (stores config in the user config .env)."""

    settings = AppSettings()

    gitlab_url = typer.prompt("GitLab URL", default=settings.gitlab_url, show_default=True).strip()
    token_file = typer.prompt("Token file", default=str(settings.token_file), show_default=True).strip()
    project_file = typer.prompt("Project file", default=str(settings.project_file), show_default=True).strip()
    remote_name = typer.prompt("Git remote name", default=settings.remote_name, show_default=True).strip()

    if not gitlab_url or not token_file or not remote_name:
        raise typer.BadParameter("GitLab URL, token file and remote name are required")

    env_path = write_user_env_vars(
        {
            "GLCLI_GITLAB_URL": gitlab_url.rstrip("/"),
            "GLCLI_TOKEN_FILE": token_file,
            "GLCLI_PROJECT_FILE": project_file or None,
            "GLCLI_REMOTE_NAME": remote_name,
        },
        env_path=get_user_env_file(),
    )

    _console.print(f"[green]Saved config to:[/green] {env_path}")
