"""Speech sink that prints narrations to the terminal.

Used when no TTS engine is available and when testing a config from the CLI.
"""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.text import Text


class ConsoleNarrator:
    """PlaybackState adapter writing narrations to a rich console."""

    def __init__(self, console: Optional[Console] = None, active: bool = True) -> None:
        self._console = console or Console()
        self._active = active

    def active(self) -> bool:
        return self._active

    def clear(self) -> None:
        self._console.print(Text("-- narrator cleared --", style="dim"))

    def say(self, text: str, interrupt: bool) -> None:
        marker = "!" if interrupt else ">"
        self._console.print(Text.assemble((f"[narrator {marker}] ", "bold cyan"), text))

    def close(self) -> None:
        self._active = False
