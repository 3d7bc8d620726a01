"""Shared pytest fixtures for the Ethakka test suite.

Provides reusable fixtures for:
- An in-memory project tree implementing the ``Filesystem`` protocol
- A recording process runner and a scripted interactive prompt
- A ready-to-use ``Scaffolder`` wired to those fakes
- Rendering helpers (catalog, renderer, name bundles)
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from ethakka.config import ScaffoldConfig
from ethakka.scaffolder.architectures import NestArchitecture
from ethakka.scaffolder.catalog import TemplateCatalog
from ethakka.scaffolder.collaborators import Question
from ethakka.scaffolder.generator import Scaffolder
from ethakka.scaffolder.naming import NameBundle, normalize
from ethakka.scaffolder.renderer import TemplateRenderer


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


def _clean(path: str) -> str:
    return path.strip("/")


class InMemoryFilesystem:
    """Dict-backed project tree.  Directories exist implicitly under files."""

    def __init__(self, files: dict[str, str] | None = None) -> None:
        self.files: dict[str, str] = dict(files or {})
        self.dirs: set[str] = set()
        self.writes: list[str] = []

    async def exists(self, path: str) -> bool:
        path = _clean(path)
        if path in self.files or path in self.dirs:
            return True
        prefix = path + "/"
        return any(p.startswith(prefix) for p in [*self.files, *self.dirs])

    async def read(self, path: str) -> str:
        try:
            return self.files[_clean(path)]
        except KeyError:
            raise FileNotFoundError(path) from None

    async def write(self, path: str, content: str) -> None:
        path = _clean(path)
        self.files[path] = content
        self.writes.append(path)

    async def remove_tree(self, path: str) -> None:
        path = _clean(path)
        prefix = path + "/"
        self.files = {p: c for p, c in self.files.items() if p != path and not p.startswith(prefix)}
        self.dirs = {d for d in self.dirs if d != path and not d.startswith(prefix)}

    async def ensure_dir(self, path: str) -> None:
        self.dirs.add(_clean(path))

    def under(self, project_dir: str) -> dict[str, str]:
        """Files below *project_dir*, keyed by their project-relative path."""
        prefix = project_dir.rstrip("/") + "/"
        return {p[len(prefix):]: c for p, c in self.files.items() if p.startswith(prefix)}


class RecordingProcessRunner:
    """Records every command; returns the queued results, then ``default``."""

    def __init__(self, results: list[bool] | None = None, default: bool = True) -> None:
        self.results = list(results or [])
        self.default = default
        self.calls: list[tuple[str, str]] = []

    async def run(self, command: str, cwd: str) -> bool:
        self.calls.append((command, cwd))
        if self.results:
            return self.results.pop(0)
        return self.default


class ScriptedPrompt:
    """Answers questions from a dict, falling back to each question's default.

    A question with no scripted answer and no default fails the test, so
    unexpected prompts are caught.
    """

    def __init__(self, answers: dict[str, Any] | None = None) -> None:
        self.answers = dict(answers or {})
        self.asked: list[Question] = []

    async def ask(self, questions: list[Question]) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for question in questions:
            self.asked.append(question)
            if question.name in self.answers:
                result[question.name] = self.answers[question.name]
            elif question.default is not None:
                result[question.name] = question.default
            else:
                raise AssertionError(f"Unexpected question: {question.name}")
        return result

    @property
    def asked_names(self) -> list[str]:
        return [q.name for q in self.asked]


# ---------------------------------------------------------------------------
# Collaborator fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def memory_fs() -> InMemoryFilesystem:
    return InMemoryFilesystem()


@pytest.fixture
def runner() -> RecordingProcessRunner:
    return RecordingProcessRunner()


@pytest.fixture
def prompt() -> ScriptedPrompt:
    return ScriptedPrompt()


@pytest.fixture
def config() -> ScaffoldConfig:
    return ScaffoldConfig()


@pytest.fixture
def scaffolder(
    config: ScaffoldConfig,
    memory_fs: InMemoryFilesystem,
    runner: RecordingProcessRunner,
    prompt: ScriptedPrompt,
) -> Scaffolder:
    """Scaffolder over the in-memory tree with default configuration."""
    return Scaffolder(config, memory_fs, runner, prompt)


@pytest.fixture
async def project(scaffolder: Scaffolder) -> str:
    """A freshly created ``shop`` project; returns its directory."""
    return await scaffolder.create_project("shop")


# ---------------------------------------------------------------------------
# Rendering fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def renderer() -> TemplateRenderer:
    return TemplateRenderer()


@pytest.fixture
def catalog(renderer: TemplateRenderer) -> TemplateCatalog:
    return TemplateCatalog(NestArchitecture(), renderer)


@pytest.fixture
def invoice() -> NameBundle:
    return normalize("invoice")


@pytest.fixture
def templates_dir() -> Path:
    return Path(__file__).resolve().parent.parent / "ethakka" / "scaffolder" / "templates"
