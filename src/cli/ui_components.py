"""UI components for the CLI (Rich).

Why separate components:
- Keeps command logic apart from visual details.
- Keeps `run` output consistent between normal and dry-run modes.
"""

from __future__ import annotations

from rich.console import Console
from rich.table import Table
from rich.text import Text

from core.domain.models import PipelineResult, PreparedTrigger, ResolvedTarget
from core.errors import ApiError, DecodeError, GlPipelineError


def build_target_text(target: ResolvedTarget) -> Text:
    text = Text()
    text.append("Project ", style="dim")
    text.append(str(target.project_id), style="bold cyan")
    if target.remote_url:
        text.append(f" ({target.remote_url})", style="dim")
    text.append("  ref ", style="dim")
    text.append(target.ref, style="bold magenta")
    return text


def print_request(console: Console, prepared: PreparedTrigger, *, auth_header: str | None = None) -> None:
    """Print the exact request (dry-run). URL and body are never wrapped or styled."""

    console.print(Text("Dry run: request not sent", style="bold yellow"))
    plain = {"markup": False, "highlight": False, "soft_wrap": True}
    console.print(f"{prepared.method} {prepared.url}", **plain)
    if auth_header:
        console.print(f"Authorization: {auth_header}", **plain)
    console.print("Content-Type: application/json", **plain)
    console.print(prepared.body, **plain)


def build_result_table(result: PipelineResult) -> Table:
    """Table for a created pipeline."""

    table = Table(title="Pipeline", show_header=False)
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    table.add_row("ID", str(result.id))
    if result.iid:
        table.add_row("IID", str(result.iid))
    table.add_row("Ref", result.ref)
    if result.sha:
        table.add_row("SHA", result.sha[:12])
    status = result.detailed_status.text or result.status
    table.add_row("Status", status)
    if result.created_at:
        table.add_row("Created", result.created_at)
    if result.duration is not None:
        table.add_row("Duration", f"{result.duration:g}s")
    table.add_row("URL", result.web_url, style="magenta")
    return table


def print_error(console: Console, exc: GlPipelineError) -> None:
    """Human-readable diagnostic; raw bodies are printed unchanged."""

    if isinstance(exc, ApiError):
        console.print(f"[bold red]Error:[/bold red] GitLab answered HTTP {exc.status_code}", highlight=False)
        console.print(exc.body or "(empty body)", markup=False, highlight=False, soft_wrap=True)
        return
    if isinstance(exc, DecodeError):
        console.print(f"[bold red]Error:[/bold red] cannot decode GitLab response ({exc.reason})", highlight=False)
        console.print(exc.body or "(empty body)", markup=False, highlight=False, soft_wrap=True)
        return
    console.print("[bold red]Error:[/bold red] ", end="")
    console.print(str(exc), markup=False, highlight=False, soft_wrap=True)
