"""simdeploy CLI — Typer-based command-line interface.

Provides the ``simdeploy`` command with subcommands for dev, rc and
production deploys, release and one-off branch creation, and version
inspection.

All output uses Rich for formatted terminal display.
"""
