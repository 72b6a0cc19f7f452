from __future__ import annotations

from typing import Optional, Protocol

from rich.console import Console
from rich.markup import escape


class Notifier(Protocol):
    def notify(self, message: str, duration_hint: Optional[float] = None) -> None: ...


class ConsoleNotifier:
    """Prints user-facing launch notices through a rich console."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def notify(self, message: str, duration_hint: Optional[float] = None) -> None:
        # A terminal keeps the message; the duration hint only matters for toasts.
        # Paths and captured stderr may contain markup-like brackets.
        style = "red" if message.startswith("Failed") else "cyan"
        self.console.print(f"[{style}]{escape(message)}[/{style}]")
