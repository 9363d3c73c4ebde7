"""glpipeline CLI (Typer).

Commands:
- `run`: trigger a pipeline for the current repository (or an explicit id).
- `doctor`: configuration and connectivity checks.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.text import Text

from adapters.json_exporter import export_result_json
from cli import doctor
from cli.logging_setup import configure_logging
from cli.ui_components import build_result_table, build_target_text, print_error, print_request
from core.config import AppSettings
from core.domain.models import PreparedTrigger, ResolvedTarget
from core.errors import ConfigError, GlPipelineError
from core.services.trigger_pipeline import TriggerHooks, TriggerOptions, trigger

app = typer.Typer(
    no_args_is_help=True,
    help="Run a GitLab CI pipeline for the current project.",
)
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)


def load_settings() -> AppSettings:
    try:
        return AppSettings()
    except ValidationError as exc:
        raise ConfigError(f"Invalid GLCLI_* configuration: {exc}") from exc


@app.command(name="run")
def run_pipeline(
    project_id: Optional[int] = typer.Option(None, "--id", min=1, help="GitLab project id."),
    ref: Optional[str] = typer.Option(
        None,
        "--branch",
        "--ref",
        "-b",
        help="Branch, tag or commit to run. Defaults to the current git branch.",
    ),
    variables: Optional[List[str]] = typer.Option(
        None,
        "--var",
        help="Pipeline variable KEY=VALUE. Can be repeated.",
    ),
    gitlab_url: Optional[str] = typer.Option(None, "--url", help="GitLab URL [env: GLCLI_GITLAB_URL]."),
    token_file: Optional[Path] = typer.Option(
        None, "--token-file", help="File holding the API token [env: GLCLI_TOKEN_FILE]."
    ),
    project_file: Optional[Path] = typer.Option(
        None, "--project-file", help="JSON file mapping repository URLs to ids [env: GLCLI_PROJECT_FILE]."
    ),
    remote: Optional[str] = typer.Option(None, "--remote", help="Git remote name [env: GLCLI_REMOTE_NAME]."),
    repo: Optional[Path] = typer.Option(None, "--repo", help="Repository directory (default: cwd)."),
    timeout: Optional[float] = typer.Option(None, "--timeout", min=0.1, help="Request timeout in seconds."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Also write the pipeline as JSON."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw pipeline JSON."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the request instead of sending it."),
    verbose: bool = typer.Option(False, "--verbose", help="Make the application more talkative."),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging."),
) -> None:
    """Trigger a pipeline run."""

    configure_logging(verbose=verbose, debug=debug)

    options = TriggerOptions(
        project_id=project_id,
        ref=ref,
        variables=list(variables or []),
        gitlab_url=gitlab_url,
        token_file=token_file,
        project_file=project_file,
        remote_name=remote,
        repo_path=repo,
        timeout_seconds=timeout,
        dry_run=dry_run,
    )

    def on_warning(message: str) -> None:
        _err_console.print(Text.assemble(("Warning: ", "yellow"), message))

    def on_resolved(target: ResolvedTarget) -> None:
        _err_console.print(build_target_text(target))

    def on_prepared(prepared: PreparedTrigger) -> None:
        if dry_run:
            print_request(_console, prepared, auth_header="Bearer ********")

    hooks = TriggerHooks(warning=on_warning, resolved=on_resolved, prepared=on_prepared)

    try:
        settings = load_settings()
        report = trigger(settings=settings, options=options, hooks=hooks)
    except GlPipelineError as exc:
        print_error(_err_console, exc)
        raise typer.Exit(code=1)

    if report.result is None:
        raise typer.Exit(code=0)

    if as_json:
        typer.echo(report.result.model_dump_json(indent=2))
    else:
        _console.print(build_result_table(report.result))

    if output:
        path = export_result_json(result=report.result, output_path=output)
        _err_console.print(f"[green]Saved pipeline JSON to:[/green] {path}")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
