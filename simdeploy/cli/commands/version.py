"""``simdeploy version --repo R`` — show a repo's current version."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from simdeploy.config import config
from simdeploy.core.workspace import Workspace
from simdeploy.errors import DeployError

console = Console()


def version_cmd(
    repo: str = typer.Option(..., "--repo", "-r", help="Simulation repository."),
    workspace_root: Path = typer.Option(
        None, "--workspace", "-w", help="Directory holding the repo checkouts."
    ),
) -> None:
    """Print the version in the repo's package.json."""
    workspace = Workspace(workspace_root or config.workspace_root)
    try:
        version = workspace.get_version(repo)
        brands = workspace.supported_brands(repo)
    except DeployError as exc:
        console.print(f"[bold red]Cannot read version:[/bold red] {exc}")
        raise typer.Exit(code=1)

    table = Table(title=f"{repo}")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Version", str(version))
    table.add_row("Test type", version.test_type or "-")
    table.add_row("Published", "[green]yes[/green]" if version.is_published else "[yellow]no[/yellow]")
    table.add_row("Release branch", version.branch_name)
    table.add_row("Supported brands", ", ".join(brands) or "-")
    console.print(table)
