"""``simdeploy create-release`` / ``simdeploy create-one-off`` — cut branches."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.panel import Panel

from simdeploy.cli import factory
from simdeploy.cli.commands.deploy import parse_brands
from simdeploy.config import config
from simdeploy.errors import DeployError
from simdeploy.models.release import ReleaseBranch

console = Console()


def _print_branch(branch: ReleaseBranch, title: str) -> None:
    lines = [
        f"[bold green]Created {branch.repo} branch {branch.branch}[/bold green]",
        "",
        f"[bold]Version:[/bold] {branch.version}",
    ]
    if branch.brands:
        lines.append(f"[bold]Brands:[/bold]  {', '.join(branch.brands)}")
    if branch.main_version is not None:
        lines.append(f"[bold]main:[/bold]    {branch.main_version}")
    console.print(Panel("\n".join(lines), title=f"[bold]{title}[/bold]", border_style="green", padding=(1, 2)))


def create_release_cmd(
    repo: str = typer.Option(..., "--repo", "-r", help="Simulation repository."),
    branch: str = typer.Option(..., "--branch", help="Release branch name (MAJOR.MINOR)."),
    brands: str = typer.Option(..., "--brands", "-b", help="Comma-separated supported brands."),
    message: str = typer.Option(None, "--message", "-m", help="Appended to the version commits."),
) -> None:
    """Create a release branch from main and advance main's version."""
    manager = factory.build_release_manager(config)
    try:
        created = manager.create_release(repo, branch, parse_brands(brands), message)
    except DeployError as exc:
        console.print(f"[bold red]Release branch creation failed:[/bold red] {exc}")
        raise typer.Exit(code=1)
    _print_branch(created, "Release Branch")


def create_one_off_cmd(
    repo: str = typer.Option(..., "--repo", "-r", help="Simulation repository."),
    branch: str = typer.Option(..., "--branch", help="One-off branch name (no '-' or '.')."),
    message: str = typer.Option(None, "--message", "-m", help="Appended to the version commit."),
) -> None:
    """Create a one-off branch from main."""
    manager = factory.build_release_manager(config)
    try:
        created = manager.create_one_off(repo, branch, message)
    except DeployError as exc:
        console.print(f"[bold red]One-off branch creation failed:[/bold red] {exc}")
        raise typer.Exit(code=1)
    _print_branch(created, "One-off Branch")
