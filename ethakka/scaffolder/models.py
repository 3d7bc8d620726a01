"""Value types shared by the scaffolding engine."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FeatureFlags:
    """Which artifact kinds a unit render emits."""

    include_crud: bool = True


@dataclass(frozen=True)
class RenderedArtifact:
    """A rendered file: POSIX path relative to the project root plus content."""

    path: str
    content: str


@dataclass(frozen=True)
class Registration:
    """An import statement and the identifier it adds to the aggregator list."""

    import_line: str
    identifier: str
