"""``simdeploy deploy dev|rc|production`` — run a deploy pipeline.

Each command builds a ``DeployOrchestrator`` from the environment config,
runs one deploy and prints the deployed URLs.  Any ``DeployError`` ends the
command with exit code 1 after the repo has been returned to ``main``.
"""

from __future__ import annotations

from collections.abc import Callable

import typer
from rich.console import Console
from rich.panel import Panel

from simdeploy.cli import factory
from simdeploy.config import config
from simdeploy.core.orchestrator import DeployOrchestrator
from simdeploy.errors import DeployError
from simdeploy.models.session import DeploySession

console = Console()


def parse_brands(brands: str) -> list[str]:
    """Split a comma-separated ``--brands`` value."""
    return [brand.strip() for brand in brands.split(",") if brand.strip()]


def _run(action: Callable[[DeployOrchestrator], DeploySession]) -> DeploySession:
    orchestrator = factory.build_orchestrator(config, console)
    try:
        return action(orchestrator)
    except DeployError as exc:
        console.print(f"[bold red]Deploy failed:[/bold red] {exc}")
        session = exc.session
        if session is not None:
            visited = " -> ".join(state.value for state in session.states_visited)
            console.print(f"[dim]{session.session_id}: {visited}[/dim]")
        raise typer.Exit(code=1)


def _print_session(session: DeploySession, title: str) -> None:
    lines = [
        f"[bold green]{session.repo} {session.version_string} deployed[/bold green]",
        "",
        f"[bold]Branch:[/bold]  {session.branch}",
        f"[bold]Brands:[/bold]  {', '.join(session.brands)}",
        f"[bold]Session:[/bold] {session.session_id}",
    ]
    if session.deployed_urls:
        lines.append("")
        lines.extend(session.deployed_urls)
    console.print(Panel("\n".join(lines), title=f"[bold]{title}[/bold]", border_style="green", padding=(1, 2)))


def dev_cmd(
    repo: str = typer.Option(..., "--repo", "-r", help="Simulation repository to deploy."),
    brands: str = typer.Option(..., "--brands", "-b", help="Comma-separated brands."),
    branch: str = typer.Option(
        "main", "--branch", help="'main', or the name of a one-off branch."
    ),
    noninteractive: bool = typer.Option(
        False, "--noninteractive", help="Answer yes to every prompt."
    ),
    message: str = typer.Option(None, "--message", "-m", help="Appended to the version commit."),
) -> None:
    """Deploy a dev (or one-off) version to the dev server."""
    session = _run(
        lambda orchestrator: orchestrator.deploy_dev(
            repo,
            parse_brands(brands),
            branch=branch,
            noninteractive=noninteractive,
            message=message,
        )
    )
    _print_session(session, "Dev Deploy")


def rc_cmd(
    repo: str = typer.Option(..., "--repo", "-r", help="Simulation repository to deploy."),
    branch: str = typer.Option(..., "--branch", help="Release branch (MAJOR.MINOR)."),
    brands: str = typer.Option(..., "--brands", "-b", help="Comma-separated brands."),
    noninteractive: bool = typer.Option(
        False, "--noninteractive", help="Answer yes to every prompt."
    ),
    message: str = typer.Option(None, "--message", "-m", help="Appended to the version commit."),
) -> None:
    """Deploy a release candidate through the build server."""
    session = _run(
        lambda orchestrator: orchestrator.deploy_rc(
            repo,
            branch,
            parse_brands(brands),
            noninteractive=noninteractive,
            message=message,
        )
    )
    _print_session(session, "RC Deploy")
    console.print("[dim]Please wait for the build-server to complete the deployment, and then test![/dim]")


def production_cmd(
    repo: str = typer.Option(..., "--repo", "-r", help="Simulation repository to deploy."),
    branch: str = typer.Option(..., "--branch", help="Release branch (MAJOR.MINOR)."),
    brands: str = typer.Option(..., "--brands", "-b", help="Comma-separated brands."),
    noninteractive: bool = typer.Option(
        False, "--noninteractive", help="Answer yes to every prompt."
    ),
    redeploy: bool = typer.Option(
        False, "--redeploy", help="Redeploy the current production version (needs --noninteractive)."
    ),
    message: str = typer.Option(None, "--message", "-m", help="Appended to the version commit."),
) -> None:
    """Deploy a release branch to production through the build server."""
    session = _run(
        lambda orchestrator: orchestrator.deploy_production(
            repo,
            branch,
            parse_brands(brands),
            noninteractive=noninteractive,
            redeploy=redeploy,
            message=message,
        )
    )
    _print_session(session, "Production Deploy")
    console.print("[dim]Please wait for the build-server to complete the deployment, and then test![/dim]")
