"""Strategy contracts and the registry that resolves them by key.

Two families of strategies parameterise the scaffolder:

* **architectures** -- which backend framework convention the generated
  project follows (template root, aggregator file, project marker);
* **persistence** -- how generated business logic stores entities and which
  configuration files, dependencies and registrations that storage needs.

Each family has a closed enum of variants.  A ``StrategyRegistry`` is built
from a factory for *every* member of that enum and instantiates all of them
up front, so a missing variant or a variant that leaves an abstract
capability unimplemented fails when the registry is constructed (at import
time), never halfway through a workflow.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any, ClassVar, Generic, TypeVar

from ethakka.errors import UnsupportedStrategyError

from .models import Registration, RenderedArtifact
from .naming import NameBundle


class ArchitectureKind(str, Enum):
    NEST = "nest"


class PersistenceKind(str, Enum):
    MEMORY = "memory"
    PRISMA = "prisma"


# ---------------------------------------------------------------------------
# Contracts
# ---------------------------------------------------------------------------


class ArchitectureStrategy(ABC):
    """Backend framework convention for generated projects."""

    kind: ClassVar[ArchitectureKind]

    @property
    @abstractmethod
    def display_name(self) -> str: ...

    @property
    @abstractmethod
    def description(self) -> str: ...

    @property
    @abstractmethod
    def template_root(self) -> str:
        """Directory under the template root holding this architecture's templates."""

    @property
    @abstractmethod
    def aggregator_path(self) -> str:
        """Project-relative path of the file that registers every unit."""

    @property
    @abstractmethod
    def marker_file(self) -> str:
        """Project-relative file whose presence identifies a generated project."""

    @property
    @abstractmethod
    def install_command(self) -> str:
        """Command that installs the generated project's dependencies."""

    @abstractmethod
    def skeleton_dirs(self) -> list[str]:
        """Directories created empty alongside the project skeleton."""

    @abstractmethod
    def unit_dir(self, names: NameBundle) -> str:
        """Project-relative directory of one unit."""

    @abstractmethod
    def unit_registration(self, names: NameBundle) -> Registration:
        """Import line and list identifier that wire a unit into the aggregator."""

    @abstractmethod
    def auth_dir(self) -> str: ...

    @abstractmethod
    def auth_registration(self) -> Registration: ...

    @abstractmethod
    def auth_dependencies(self, use_jwt: bool) -> tuple[dict[str, str], dict[str, str]]:
        """``(dependencies, dev_dependencies)`` required by the auth unit."""


class PersistenceStrategy(ABC):
    """Storage convention used by generated business logic."""

    kind: ClassVar[PersistenceKind]

    @property
    @abstractmethod
    def display_name(self) -> str: ...

    @property
    @abstractmethod
    def description(self) -> str: ...

    @abstractmethod
    def dependencies(self) -> dict[str, str]: ...

    @abstractmethod
    def dev_dependencies(self) -> dict[str, str]: ...

    @abstractmethod
    def scripts(self) -> dict[str, str]:
        """``package.json`` scripts the strategy adds."""

    @abstractmethod
    def package_fields(self) -> dict[str, Any]:
        """Extra top-level ``package.json`` fields the strategy adds."""

    @abstractmethod
    def render_config(self, project_name: str) -> list[RenderedArtifact]:
        """Configuration files written when the strategy is added to a project."""

    @abstractmethod
    def render_model(self, names: NameBundle) -> str:
        """Entity/model definition for one unit."""

    @abstractmethod
    def render_service(self, names: NameBundle) -> str:
        """CRUD business-logic file for one unit."""

    @abstractmethod
    def render_user_service(self) -> str:
        """Business logic of the user unit that backs authentication."""

    @abstractmethod
    def registration(self) -> Registration | None:
        """Aggregator registration for the strategy's own module, if any."""

    @abstractmethod
    def schema_path(self) -> str | None:
        """Project-relative schema file that collects model blocks, if any."""

    @abstractmethod
    def setup_steps(self) -> list[str]:
        """Manual follow-up steps printed after the strategy is added."""


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

K = TypeVar("K", bound=Enum)
S = TypeVar("S")


class StrategyRegistry(Generic[K, S]):
    """Resolves strategies by case-insensitive key.

    Args:
        label: Human name of the family, used in error messages.
        kinds: The closed enum of variants.
        factories: A factory for every member of *kinds*.
        aliases: Extra accepted keys mapped to a variant.
    """

    def __init__(
        self,
        label: str,
        kinds: type[K],
        factories: Mapping[K, Callable[[], S]],
        aliases: Mapping[str, K] | None = None,
    ) -> None:
        missing = [k.value for k in kinds if k not in factories]
        if missing:
            raise TypeError(f"{label} registry has no factory for: {', '.join(missing)}")

        self.label = label
        self._strategies: dict[K, S] = {kind: factories[kind]() for kind in kinds}
        self._lookup: dict[str, K] = {kind.value.lower(): kind for kind in kinds}
        for alias, kind in (aliases or {}).items():
            self._lookup[alias.lower()] = kind

    def keys(self) -> list[str]:
        """Every accepted key, aliases included, sorted."""
        return sorted(self._lookup)

    def kinds(self) -> list[K]:
        return list(self._strategies)

    def resolve(self, key: str) -> S:
        """Return the strategy for *key* or raise ``UnsupportedStrategyError``."""
        kind = self._lookup.get(key.strip().lower())
        if kind is None:
            raise UnsupportedStrategyError(self.label, key, self.keys())
        return self._strategies[kind]

    def get(self, kind: K) -> S:
        return self._strategies[kind]
