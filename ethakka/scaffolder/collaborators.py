"""Side-effecting collaborators of the ``Scaffolder``.

The orchestrator never touches the disk, spawns processes or reads the
terminal directly; it goes through the three protocols below.  Production
implementations live here; tests substitute in-memory fakes.
"""

from __future__ import annotations

import asyncio
import shutil
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Protocol, runtime_checkable

from rich.prompt import Confirm, Prompt

from ethakka.utils import console, print_warning, run_command


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------


@runtime_checkable
class Filesystem(Protocol):
    """Project tree access.  Paths are POSIX strings relative to a root."""

    async def exists(self, path: str) -> bool: ...

    async def read(self, path: str) -> str: ...

    async def write(self, path: str, content: str) -> None: ...

    async def remove_tree(self, path: str) -> None: ...

    async def ensure_dir(self, path: str) -> None: ...


@runtime_checkable
class ProcessRunner(Protocol):
    """Runs an external command; returns ``True`` on success."""

    async def run(self, command: str, cwd: str) -> bool: ...


@dataclass
class Question:
    """One interactive question.

    ``validate`` returns ``True`` for an acceptable answer or an error
    message to show before asking again.
    """

    name: str
    message: str
    kind: Literal["input", "confirm", "choice"] = "input"
    default: Any = None
    choices: list[tuple[str, str]] = field(default_factory=list)
    validate: Callable[[str], bool | str] | None = None


@runtime_checkable
class InteractivePrompt(Protocol):
    """Asks the user for missing details; returns answers keyed by question name."""

    async def ask(self, questions: list[Question]) -> dict[str, Any]: ...


# ---------------------------------------------------------------------------
# Local implementations
# ---------------------------------------------------------------------------


class LocalFilesystem:
    """``Filesystem`` backed by ``pathlib`` under *root*.

    Blocking I/O runs in a worker thread so the event loop stays responsive.
    """

    def __init__(self, root: str | Path = ".") -> None:
        self.root = Path(root)

    def resolve(self, path: str) -> Path:
        return self.root / path if path else self.root

    async def exists(self, path: str) -> bool:
        return await asyncio.to_thread(self.resolve(path).exists)

    async def read(self, path: str) -> str:
        return await asyncio.to_thread(self.resolve(path).read_text, encoding="utf-8")

    async def write(self, path: str, content: str) -> None:
        await asyncio.to_thread(_write_file, self.resolve(path), content)

    async def remove_tree(self, path: str) -> None:
        target = self.resolve(path)
        if target.is_dir():
            await asyncio.to_thread(shutil.rmtree, target)
        elif target.exists():
            await asyncio.to_thread(target.unlink)

    async def ensure_dir(self, path: str) -> None:
        await asyncio.to_thread(self.resolve(path).mkdir, parents=True, exist_ok=True)


class SubprocessRunner:
    """``ProcessRunner`` that runs shell commands under *root*.

    Output is streamed to the terminal rather than captured, so long
    installs show progress.
    """

    def __init__(self, root: str | Path = ".", timeout: int = 600) -> None:
        self.root = Path(root)
        self.timeout = timeout

    async def run(self, command: str, cwd: str) -> bool:
        rc, _, stderr = await run_command(
            command,
            cwd=self.root / cwd if cwd else self.root,
            timeout=self.timeout,
            capture=False,
        )
        if rc != 0 and stderr:
            print_warning(stderr)
        return rc == 0


class RichPrompt:
    """``InteractivePrompt`` using ``rich.prompt``."""

    async def ask(self, questions: list[Question]) -> dict[str, Any]:
        return await asyncio.to_thread(self._ask_all, questions)

    def _ask_all(self, questions: list[Question]) -> dict[str, Any]:
        return {q.name: self._ask_one(q) for q in questions}

    def _ask_one(self, question: Question) -> Any:
        if question.kind == "confirm":
            return Confirm.ask(question.message, default=bool(question.default), console=console)

        if question.kind == "choice":
            for value, label in question.choices:
                console.print(f"  [bold]{value}[/bold] - {label}")
            return Prompt.ask(
                question.message,
                choices=[value for value, _ in question.choices],
                default=question.default,
                console=console,
            )

        while True:
            if question.default is None:
                answer = Prompt.ask(question.message, console=console)
            else:
                answer = Prompt.ask(question.message, default=question.default, console=console)
            verdict = question.validate(answer) if question.validate else True
            if verdict is True:
                return answer
            print_warning(verdict if isinstance(verdict, str) else "Invalid value")


def _write_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
