"""Confirmation gates.

A ``Confirmer`` answers a yes/no question.  The pipeline always passes its
``noninteractive`` flag along; a noninteractive gate is approved without
asking.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from rich.console import Console
from rich.prompt import Confirm


@runtime_checkable
class Confirmer(Protocol):
    def __call__(self, prompt: str, noninteractive: bool) -> bool: ...


class TerminalConfirmer:
    """Asks on the terminal with ``rich.prompt.Confirm`` (default: no)."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()

    def __call__(self, prompt: str, noninteractive: bool) -> bool:
        if noninteractive:
            return True
        return Confirm.ask(prompt, console=self._console, default=False)
