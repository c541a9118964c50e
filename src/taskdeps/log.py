"""Logging utilities with colored output via Rich.

Operations receive a :class:`Logger` explicitly instead of consulting a
process-wide silent flag. Library callers that want no output pass
:data:`NULL` (the default everywhere in the core).
"""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel


class Logger:
    def __init__(
        self,
        *,
        verbose: bool = False,
        quiet: bool = False,
        console: Console | None = None,
        err_console: Console | None = None,
    ) -> None:
        self.verbose = verbose
        self.quiet = quiet
        self.console = console or Console(highlight=False)
        self._err_console = err_console or Console(highlight=False, stderr=True)

    def info(self, msg: str) -> None:
        if not self.quiet:
            self.console.print(f"[blue]\\[INFO][/blue] {msg}")

    def success(self, msg: str) -> None:
        if not self.quiet:
            self.console.print(f"[green]\\[OK][/green] {msg}")

    def warn(self, msg: str) -> None:
        if not self.quiet:
            self.console.print(f"[yellow]\\[WARN][/yellow] {msg}")

    def error(self, msg: str) -> None:
        self._err_console.print(f"[red]\\[ERROR][/red] {msg}")

    def debug(self, msg: str) -> None:
        if self.verbose and not self.quiet:
            self.console.print(f"[dim]\\[DEBUG] {msg}[/dim]")

    def panel(self, body: str, *, title: str = "", style: str = "green") -> None:
        """Print a rounded summary box (skipped in quiet mode)."""
        if self.quiet:
            return
        self.console.print(
            Panel(body, title=title or None, border_style=style, padding=(1, 2), expand=False)
        )


class NullLogger(Logger):
    """Logger that drops everything, errors included."""

    def __init__(self) -> None:
        super().__init__(quiet=True)

    def error(self, msg: str) -> None:
        pass


NULL = NullLogger()


def get_logger(*, verbose: bool = False, quiet: bool = False) -> Logger:
    return Logger(verbose=verbose, quiet=quiet)
