"""Shared utility functions for Ethakka.

Provides async command execution, Rich-based console reporting and a few
formatting helpers.  All user-facing output of the scaffolder goes through
the module-level ``console`` so tests can capture or silence it in one place.
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: str | list[str],
    cwd: str | Path | None = None,
    timeout: int = 600,
    capture: bool = True,
    env: dict[str, str] | None = None,
) -> tuple[int, str, str]:
    """Run a shell command asynchronously.

    Args:
        cmd: Shell command string or list of arguments.
        cwd: Working directory for the child process.
        timeout: Maximum wall-clock seconds before the process is killed.
        capture: Whether to capture stdout/stderr (if ``False`` they inherit
            the parent's streams, which is what ``npm install`` wants).
        env: Optional extra environment variables merged on top of ``os.environ``.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple.  If *capture* is ``False``
        the stdout/stderr strings will be empty.
    """
    merged_env: dict[str, str] | None = None
    if env:
        merged_env = {**os.environ, **env}

    stdout_pipe = asyncio.subprocess.PIPE if capture else None
    stderr_pipe = asyncio.subprocess.PIPE if capture else None

    if isinstance(cmd, list):
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=stdout_pipe,
            stderr=stderr_pipe,
            cwd=str(cwd) if cwd else None,
            env=merged_env,
        )
    else:
        process = await asyncio.create_subprocess_shell(
            cmd,
            stdout=stdout_pipe,
            stderr=stderr_pipe,
            cwd=str(cwd) if cwd else None,
            env=merged_env,
        )

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return (
            -1,
            "",
            f"Command timed out after {timeout}s: {cmd if isinstance(cmd, str) else ' '.join(cmd)}",
        )

    stdout_str = (stdout_bytes or b"").decode("utf-8", errors="replace").strip()
    stderr_str = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()
    return (process.returncode or 0, stdout_str, stderr_str)


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples::

        format_duration(3.7)    -> "3.7s"
        format_duration(65.2)   -> "1m 5s"
    """
    if seconds < 0:
        return "0.0s"

    minutes = int(seconds // 60)
    secs = seconds % 60
    if minutes > 0:
        return f"{minutes}m {int(secs)}s"
    return f"{secs:.1f}s"


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_step_header(step: str) -> None:
    """Print a full-width rule announcing a workflow step."""
    console.print()
    console.print(Rule(f"[bold bright_cyan] {step} [/bold bright_cyan]", style="bright_cyan"))


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table.

    Args:
        data: Mapping of label -> value.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{escape(message)}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{escape(message)}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{escape(message)}[/bold yellow]")


def print_info(message: str) -> None:
    """Print a cyan informational message."""
    console.print(f"[cyan]{escape(message)}[/cyan]")
