"""Rich output for the moments the fullscreen UI is not running.

Startup failures (missing mpv, unusable library directory) are printed here
before blessed takes over the terminal.
"""

from rich.console import Console
from rich.markup import escape

_console: Console | None = None


def get_console() -> Console:
    """Get or create the stderr console."""
    global _console
    if _console is None:
        _console = Console(stderr=True, highlight=False)
    return _console


def print_error(message: str) -> None:
    get_console().print(f"[bold red]Error:[/] {escape(message)}")


def print_missing_dependencies(names: list[str]) -> None:
    """List required executables that could not be run."""
    console = get_console()
    console.print(f"[bold red]Missing dependencies:[/] {escape(', '.join(names))}")
    for name in names:
        console.print(f"  install [cyan]{escape(name)}[/] and make sure it is on PATH")
