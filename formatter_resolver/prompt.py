"""Interactive choice prompts.

The resolver suspends on `ChoicePrompt.ask` when it needs the user to pick a
package manager. A cancelled prompt answers None (or -1).
"""

import asyncio
from typing import Protocol

from rich.prompt import Prompt

from .console import console as default_console


class ChoicePrompt(Protocol):
    """Asks the user to pick one of several labels."""

    async def ask(self, labels: list[str], title: str) -> int | None:
        """Return the index of the chosen label, or None/-1 when cancelled."""
        ...


class ConsoleChoicePrompt:
    """Numbered-menu prompt on the terminal."""

    def __init__(self, console=None):
        self.console = console or default_console

    async def ask(self, labels: list[str], title: str) -> int | None:
        return await asyncio.to_thread(self._ask_sync, labels, title)

    def _ask_sync(self, labels: list[str], title: str) -> int | None:
        self.console.print(f"[bold]{title}[/bold]")
        for idx, label in enumerate(labels, start=1):
            self.console.print(f"  [{idx}] {label}")
        self.console.print("  [0] cancel")

        choices = [str(i) for i in range(len(labels) + 1)]
        try:
            answer = Prompt.ask("Choice", choices=choices, default="0", console=self.console)
        except (EOFError, KeyboardInterrupt):
            return None

        index = int(answer) - 1
        return index if index >= 0 else None


class StaticChoicePrompt:
    """Prompt that always answers with a fixed index (non-interactive runs)."""

    def __init__(self, index: int | None):
        self.index = index

    async def ask(self, labels: list[str], title: str) -> int | None:
        if self.index is None or not 0 <= self.index < len(labels):
            return None
        return self.index
