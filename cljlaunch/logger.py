"""
Logging helpers: coloured, timestamped diagnostics via rich.

Everything here is written to standard error.  Standard output is reserved for
what the launcher is asked to print (``-Spath``, ``-Sdescribe``, ``--version``)
and for the child process itself.
"""
import time
from datetime import datetime

from rich.console import Console
from rich.markup import escape

_console = Console(stderr=True, highlight=False, soft_wrap=True)


def _ts() -> str:
    return datetime.now().strftime("%H:%M:%S")


def info(msg: str) -> None:
    _console.print(f"[dim]{_ts()}[/dim]  [blue]ℹ[/blue]  {escape(msg)}")


def success(msg: str) -> None:
    _console.print(f"[dim]{_ts()}[/dim]  [bold green]✔[/bold green]  {escape(msg)}")


def warn(msg: str) -> None:
    _console.print(f"[dim]{_ts()}[/dim]  [bold yellow]⚠[/bold yellow]  {escape(msg)}")


def error(msg: str) -> None:
    _console.print(f"[dim]{_ts()}[/dim]  [bold red]✖[/bold red]  {escape(msg)}")


def field(label: str, value: str) -> None:
    """One aligned ``label = value`` line, used by ``-Sverbose``."""
    info(f"{label:<12} = {value}")


def duration(seconds: float) -> str:
    if seconds < 60:
        return f"{seconds:.1f}s"
    m, s = divmod(int(seconds), 60)
    return f"{m}m{s:02d}s"


def elapsed_since(start: float) -> str:
    return duration(time.time() - start)
