"""Main Typer application — imports and registers all CLI commands.

Entry point: ``simdeploy`` (configured via pyproject.toml scripts).

Commands: deploy dev|rc|production, create-release, create-one-off, version.
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from simdeploy.cli.commands.branches import create_one_off_cmd, create_release_cmd
from simdeploy.cli.commands.deploy import dev_cmd, production_cmd, rc_cmd
from simdeploy.cli.commands.version import version_cmd
from simdeploy.config import config

app = typer.Typer(
    name="simdeploy",
    help="simdeploy: version lifecycle and deployment pipeline for simulation repos.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

deploy_app = typer.Typer(
    help="Deploy a simulation to dev, rc or production.",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None, "--log-level", help="Logging level (defaults to SIMDEPLOY_LOG_LEVEL)."
    ),
) -> None:
    """Configure logging for every command."""
    logging.basicConfig(
        level=(log_level or config.log_level).upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


# Register subcommands
deploy_app.command(name="dev", help="Deploy a dev or one-off version to the dev server.")(dev_cmd)
deploy_app.command(name="rc", help="Deploy a release candidate via the build server.")(rc_cmd)
deploy_app.command(name="production", help="Deploy to production via the build server.")(
    production_cmd
)
app.add_typer(deploy_app, name="deploy")
app.command(name="create-release", help="Create a MAJOR.MINOR release branch.")(create_release_cmd)
app.command(name="create-one-off", help="Create a one-off branch.")(create_one_off_cmd)
app.command(name="version", help="Show a repo's current version.")(version_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
