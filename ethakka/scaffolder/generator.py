"""Scaffolding orchestrator.

The ``Scaffolder`` sequences the project workflows (create project, create
unit, add auth, add persistence and the composite "everything" workflow)
over three collaborators: a ``Filesystem`` for the project tree, a
``ProcessRunner`` for dependency installs and an ``InteractivePrompt`` for
details the caller did not supply.  Rendering is delegated to the
``TemplateCatalog``; aggregator wiring to the registration patcher.

Every workflow runs strictly sequentially.  A failure moves the scaffolder
to ``FAILED`` and surfaces as a ``WorkflowError`` naming the step; files
written by earlier steps are left in place.
"""

from __future__ import annotations

import json
import time
from collections.abc import Awaitable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath
from typing import Any, TypeVar

from pydantic import ValidationError
from rich.panel import Panel

from ethakka.config import ProjectManifest, ScaffoldConfig
from ethakka.errors import (
    ConflictError,
    EthakkaError,
    ExternalProcessError,
    NameValidationError,
    ProjectNotFoundError,
    UnsupportedStrategyError,
    WorkflowError,
)
from ethakka.utils import (
    console,
    format_duration,
    print_info,
    print_step_header,
    print_success,
    print_summary_table,
    print_warning,
)

from .architectures import architecture_registry
from .catalog import REST_CLIENT_MARKER, TemplateCatalog
from .collaborators import Filesystem, InteractivePrompt, ProcessRunner, Question
from .environment import PRESERVED_ENV_FILES
from .models import FeatureFlags, Registration, RenderedArtifact
from .naming import USER_UNIT, NameBundle, is_valid_name, normalize, validate_name
from .package_json import declare_dependencies
from .patcher import append_section, patch
from .persistence import persistence_registry
from .renderer import TemplateRenderer
from .strategies import ArchitectureStrategy, PersistenceStrategy

T = TypeVar("T")

DEFAULT_PROJECT_NAME = "my-nestjs-app"
_NAME_HINT = (
    "Name needs a lowercase letter and may only include lowercase letters, "
    "numbers, underscores and hyphens."
)


class ScaffoldState(str, Enum):
    INIT = "init"
    STRUCTURE_CREATED = "structure_created"
    DEPENDENCIES_DECLARED = "dependencies_declared"
    PERSISTENCE_ADDED = "persistence_added"
    AUTH_ADDED = "auth_added"
    UNITS_CREATED = "units_created"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class UnitPlan:
    """Units a composite run will create, after de-duplication."""

    units: list[NameBundle] = field(default_factory=list)
    dropped: list[str] = field(default_factory=list)


def plan_units(raw_names: list[str], auth: bool) -> UnitPlan:
    """Validate and de-duplicate requested units by singular identity.

    With *auth* the implicit user unit is already taken, so any requested
    unit whose singular form is ``user`` is dropped.

    Raises:
        NameValidationError: If any name is not a valid token.
    """
    for raw in raw_names:
        validate_name(raw)

    seen = {USER_UNIT.singular} if auth else set()
    units: list[NameBundle] = []
    dropped: list[str] = []
    for raw in raw_names:
        names = normalize(raw)
        if names.singular in seen:
            dropped.append(raw)
            continue
        seen.add(names.singular)
        units.append(names)
    return UnitPlan(units=units, dropped=dropped)


def parse_unit_list(value: str) -> list[str]:
    """Split a comma-separated answer into unit names."""
    return [part.strip() for part in value.split(",") if part.strip()]


class Scaffolder:
    """Runs scaffolding workflows against a project tree.

    Args:
        config: Global scaffolder configuration.
        fs: Project tree access, rooted at the working directory.
        runner: Runs the dependency install command.
        prompt: Asks for details not supplied by the caller.
        architecture: Architecture strategy; resolved from
            ``config.default_architecture`` when omitted.
        renderer: Template renderer shared by the catalog.
    """

    def __init__(
        self,
        config: ScaffoldConfig,
        fs: Filesystem,
        runner: ProcessRunner,
        prompt: InteractivePrompt,
        architecture: ArchitectureStrategy | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.config = config
        self.fs = fs
        self.runner = runner
        self.prompt = prompt
        self.renderer = renderer or TemplateRenderer()
        self.architecture = architecture or architecture_registry.resolve(
            config.default_architecture
        )
        self.catalog = TemplateCatalog(self.architecture, self.renderer, config.app)
        self.state = ScaffoldState.INIT
        self.history: list[ScaffoldState] = [ScaffoldState.INIT]

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def _transition(self, state: ScaffoldState) -> None:
        self.state = state
        self.history.append(state)

    async def _run_step(self, step: str, work: Awaitable[T]) -> T:
        """Await *work*, converting scaffolder errors into ``WorkflowError``.

        Filesystem errors and invalid manifests raised by collaborators are
        wrapped the same way, so every failure names the step that hit it.
        """
        try:
            return await work
        except WorkflowError:
            if self.state is not ScaffoldState.FAILED:
                self._transition(ScaffoldState.FAILED)
            raise
        except (EthakkaError, OSError, ValidationError) as exc:
            self._transition(ScaffoldState.FAILED)
            raise WorkflowError(step, str(exc)) from exc

    def use_architecture(self, architecture: ArchitectureStrategy) -> None:
        self.architecture = architecture
        self.catalog = TemplateCatalog(architecture, self.renderer, self.config.app)

    # ------------------------------------------------------------------
    # Workflows
    # ------------------------------------------------------------------

    async def create_project(self, name: str | None = None, architecture: str | None = None) -> str:
        """Create a new project directory named *name*; returns its path."""
        return await self._run_step("create-project", self._create_project(name, architecture))

    async def create_unit(
        self,
        name: str | None = None,
        include_crud: bool | None = None,
        *,
        project_dir: str = "",
    ) -> NameBundle:
        """Create one unit inside the project at *project_dir*."""
        return await self._run_step(
            f"create-unit {name}" if name else "create-unit",
            self._create_unit(name, include_crud, project_dir),
        )

    async def add_auth(self, use_jwt: bool | None = None, *, project_dir: str = "") -> None:
        """Add the auth unit and the user unit it depends on."""
        await self._run_step("add-auth", self._add_auth(use_jwt, project_dir))

    async def add_persistence(
        self, key: str | None = None, *, project_dir: str = ""
    ) -> PersistenceStrategy:
        """Add the persistence backend named *key*; returns the resolved strategy."""
        return await self._run_step("add-persistence", self._add_persistence(key, project_dir))

    async def create_everything(
        self,
        name: str | None = None,
        auth: bool | None = None,
        persistence: str | None = None,
        units: list[str] | None = None,
    ) -> dict[str, Any]:
        """Create a project, install it, then add persistence, auth and units.

        Returns:
            A summary dictionary with the project name, created units,
            dropped units, final state and the state history.
        """
        started = time.monotonic()
        console.print(
            Panel(
                f"[bold bright_cyan]Ethakka[/bold bright_cyan]\n"
                f"Architecture : {self.architecture.display_name}",
                title="[bold]Scaffold Everything[/bold]",
                border_style="bright_cyan",
            )
        )

        questions: list[Question] = []
        if name is None:
            questions.append(_project_name_question())
        if auth is None:
            questions.append(
                Question(
                    name="auth",
                    message="Do you want to include authentication?",
                    kind="confirm",
                    default=True,
                )
            )
        if units is None:
            questions.append(
                Question(
                    name="units",
                    message="Which modules do you want to create? (comma-separated)",
                    default="",
                )
            )
        answers = await self.prompt.ask(questions) if questions else {}
        name = name if name is not None else answers["name"]
        auth = auth if auth is not None else bool(answers["auth"])
        if units is None:
            units = parse_unit_list(answers["units"])

        summary: dict[str, Any] = {"project": name, "units": [], "dropped": []}
        try:
            try:
                plan = plan_units(units, auth)
            except NameValidationError as exc:
                self._transition(ScaffoldState.FAILED)
                raise WorkflowError("plan-units", str(exc)) from exc
            if persistence:
                try:
                    persistence = persistence_registry.resolve(persistence).kind.value
                except UnsupportedStrategyError as exc:
                    self._transition(ScaffoldState.FAILED)
                    raise WorkflowError("add-persistence", str(exc)) from exc
            for raw in plan.dropped:
                print_warning(
                    f"Skipping module '{raw}': it duplicates a module that is already planned."
                )
            summary["dropped"] = plan.dropped

            print_step_header("Project")
            project_dir = await self.create_project(name)

            print_step_header("Dependencies")
            await self._run_step("install", self._install(project_dir))
            self._transition(ScaffoldState.DEPENDENCIES_DECLARED)

            if persistence:
                print_step_header("Persistence")
                await self.add_persistence(persistence, project_dir=project_dir)
            if auth:
                print_step_header("Authentication")
                await self.add_auth(True, project_dir=project_dir)
            if persistence or auth:
                await self._run_step("install", self._install(project_dir))

            if plan.units:
                print_step_header("Modules")
            for names in plan.units:
                await self.create_unit(names.raw, include_crud=True, project_dir=project_dir)
                summary["units"].append(names.plural)

            self._transition(ScaffoldState.DONE)
        finally:
            summary["state"] = self.state.value
            summary["history"] = [s.value for s in self.history]
            summary["duration"] = format_duration(time.monotonic() - started)
            self._print_final_summary(summary)

        print_info(f"To get started:\n$ cd {name}\n$ npm run start:dev")
        return summary

    # ------------------------------------------------------------------
    # Workflow bodies
    # ------------------------------------------------------------------

    async def _create_project(self, name: str | None, architecture: str | None) -> str:
        if architecture:
            self.use_architecture(architecture_registry.resolve(architecture))
        if name is None:
            answers = await self.prompt.ask([_project_name_question()])
            name = answers["name"]
        validate_name(name)

        await self._confirm_overwrite(name)
        await self.fs.ensure_dir(name)
        await self._write_artifacts(name, self.catalog.render_project(name))
        for directory in self.architecture.skeleton_dirs():
            await self.fs.ensure_dir(_join(name, directory))
        await self._write_artifacts(
            name, self.catalog.render_environment(name), preserve=PRESERVED_ENV_FILES
        )
        await self._save_manifest(
            name, ProjectManifest(name=name, architecture=self.architecture.kind.value)
        )

        self._transition(ScaffoldState.STRUCTURE_CREATED)
        print_success(f"Project {name} created successfully!")
        return name

    async def _create_unit(
        self, name: str | None, include_crud: bool | None, project_dir: str
    ) -> NameBundle:
        await self._require_project(project_dir)

        questions: list[Question] = []
        if name is None:
            questions.append(
                Question(
                    name="name",
                    message="What is the name of your module?",
                    validate=_validate_answer,
                )
            )
        if include_crud is None:
            questions.append(
                Question(
                    name="crud",
                    message="Do you want to include CRUD operations?",
                    kind="confirm",
                    default=True,
                )
            )
        if questions:
            answers = await self.prompt.ask(questions)
            name = name if name is not None else answers["name"]
            include_crud = include_crud if include_crud is not None else bool(answers["crud"])
        validate_name(name)

        names = normalize(name)
        unit_dir = self.architecture.unit_dir(names)
        await self._confirm_overwrite(_join(project_dir, unit_dir))

        manifest = await self._load_manifest(project_dir)
        strategy = _active_persistence(manifest)
        flags = FeatureFlags(include_crud=bool(include_crud))

        await self._write_artifacts(project_dir, self.catalog.render(names, flags, strategy))
        if strategy is not None and strategy.schema_path():
            await self._append_model(project_dir, strategy, names)
        if flags.include_crud:
            await self._write_artifacts(project_dir, [self.catalog.render_rest_client(names)])
            await self._append_rest_client_readme(project_dir)

        await self._register(project_dir, self.architecture.unit_registration(names))
        await self._save_manifest(project_dir, manifest.with_unit(names.plural))

        self._transition(ScaffoldState.UNITS_CREATED)
        print_success(f"Module {names.plural} created successfully!")
        return names

    async def _add_auth(self, use_jwt: bool | None, project_dir: str) -> None:
        await self._require_project(project_dir)
        if use_jwt is None:
            answers = await self.prompt.ask(
                [
                    Question(
                        name="jwt",
                        message="Do you want to use JWT authentication?",
                        kind="confirm",
                        default=True,
                    )
                ]
            )
            use_jwt = bool(answers["jwt"])

        await self._confirm_overwrite(_join(project_dir, self.architecture.auth_dir()))

        manifest = await self._load_manifest(project_dir)
        strategy = _active_persistence(manifest)

        await self._write_artifacts(project_dir, self.catalog.render_auth(use_jwt))

        user_dir = _join(project_dir, self.architecture.unit_dir(USER_UNIT))
        if await self.fs.exists(user_dir):
            print_warning("User module already exists. Skipping creation.")
        else:
            await self._write_artifacts(project_dir, self.catalog.render_user_unit(strategy))
        await self._register(project_dir, self.architecture.unit_registration(USER_UNIT))
        await self._register(project_dir, self.architecture.auth_registration())

        deps, dev_deps = self.architecture.auth_dependencies(use_jwt)
        await self._declare(project_dir, dependencies=deps, dev_dependencies=dev_deps)

        await self._write_artifacts(project_dir, [self.catalog.render_auth_rest_client()])
        await self._append_rest_client_readme(project_dir)

        manifest = manifest.with_unit(USER_UNIT.plural).model_copy(update={"auth": True})
        await self._save_manifest(project_dir, manifest)

        self._transition(ScaffoldState.AUTH_ADDED)
        print_success("Authentication module created successfully!")
        print_info(
            "To complete setup:\n"
            "1. Run npm install to install new dependencies\n"
            "2. Add your JWT_SECRET to your .env file"
        )

    async def _add_persistence(self, key: str | None, project_dir: str) -> PersistenceStrategy:
        await self._require_project(project_dir)
        if key is None:
            kinds = persistence_registry.kinds()
            answers = await self.prompt.ask(
                [
                    Question(
                        name="persistence",
                        message="Select a database integration",
                        kind="choice",
                        default=kinds[-1].value,
                        choices=[
                            (
                                kind.value,
                                f"{persistence_registry.get(kind).display_name} - "
                                f"{persistence_registry.get(kind).description}",
                            )
                            for kind in kinds
                        ],
                    )
                ]
            )
            key = answers["persistence"]
        strategy = persistence_registry.resolve(key)

        print_info(f"Adding {strategy.display_name} database support...")
        manifest = await self._load_manifest(project_dir)
        artifacts = strategy.render_config(manifest.name)
        await self._confirm_replace(project_dir, [artifact.path for artifact in artifacts])
        await self._write_artifacts(project_dir, artifacts)
        await self._declare(
            project_dir,
            dependencies=strategy.dependencies(),
            dev_dependencies=strategy.dev_dependencies(),
            scripts=strategy.scripts(),
            fields=strategy.package_fields(),
        )
        registration = strategy.registration()
        if registration is not None:
            await self._register(project_dir, registration)

        await self._save_manifest(
            project_dir, manifest.model_copy(update={"persistence": strategy.kind.value})
        )

        self._transition(ScaffoldState.PERSISTENCE_ADDED)
        print_success(f"{strategy.display_name} database integration added successfully!")
        steps = ["Run npm install to install new dependencies", *strategy.setup_steps()]
        print_info(
            "To complete setup:\n" + "\n".join(f"{i}. {s}" for i, s in enumerate(steps, 1))
        )
        return strategy

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _install(self, project_dir: str) -> None:
        if not self.config.run_install:
            print_warning("Skipping dependency install (disabled in configuration).")
            return
        command = self.config.install_command or self.architecture.install_command
        print_info(f"Running {command} in {project_dir or '.'} ...")
        if not await self.runner.run(command, project_dir):
            raise ExternalProcessError(command, f"in {project_dir or '.'}")

    async def _require_project(self, project_dir: str) -> None:
        marker = self.architecture.marker_file
        if not await self.fs.exists(_join(project_dir, marker)):
            raise ProjectNotFoundError(project_dir or ".", marker)

    async def _confirm_overwrite(self, path: str) -> None:
        if not await self.fs.exists(path):
            return
        answers = await self.prompt.ask(
            [
                Question(
                    name="overwrite",
                    message=f"{path} already exists. Do you want to overwrite it?",
                    kind="confirm",
                    default=False,
                )
            ]
        )
        if not answers.get("overwrite"):
            raise ConflictError(path)
        await self.fs.remove_tree(path)

    async def _confirm_replace(self, project_dir: str, paths: list[str]) -> None:
        """Ask once before replacing any of *paths* that already exist."""
        existing = [p for p in paths if await self.fs.exists(_join(project_dir, p))]
        if not existing:
            return
        answers = await self.prompt.ask(
            [
                Question(
                    name="overwrite",
                    message=f"{', '.join(existing)} already exist. Do you want to overwrite them?",
                    kind="confirm",
                    default=False,
                )
            ]
        )
        if not answers.get("overwrite"):
            raise ConflictError(_join(project_dir, existing[0]))

    async def _write_artifacts(
        self,
        project_dir: str,
        artifacts: list[RenderedArtifact],
        *,
        preserve: frozenset[str] = frozenset(),
    ) -> None:
        for artifact in artifacts:
            path = _join(project_dir, artifact.path)
            if artifact.path in preserve and await self.fs.exists(path):
                print_warning(f"{artifact.path} already exists. Skipping...")
                continue
            await self.fs.write(path, artifact.content)

    async def _register(self, project_dir: str, registration: Registration) -> bool:
        aggregator = _join(project_dir, self.architecture.aggregator_path)
        if not await self.fs.exists(aggregator):
            print_warning(
                f"{self.architecture.aggregator_path} not found. "
                f"Could not register {registration.identifier}."
            )
            return False

        result = patch(
            await self.fs.read(aggregator), registration.import_line, registration.identifier
        )
        if not result.changed:
            print_warning(f"{registration.identifier} is already registered.")
            return False
        await self.fs.write(aggregator, result.text)
        if result.warning is not None:
            print_warning(str(result.warning))
        return True

    async def _declare(
        self,
        project_dir: str,
        *,
        dependencies: dict[str, str] | None = None,
        dev_dependencies: dict[str, str] | None = None,
        scripts: dict[str, str] | None = None,
        fields: dict[str, Any] | None = None,
    ) -> None:
        path = _join(project_dir, "package.json")
        if not await self.fs.exists(path):
            print_warning("package.json not found. Could not update dependencies.")
            return
        try:
            text = declare_dependencies(
                await self.fs.read(path), dependencies, dev_dependencies, scripts, fields
            )
        except ValueError as exc:
            raise EthakkaError(f"Could not update package.json: {exc}") from exc
        await self.fs.write(path, text)

    async def _append_model(
        self, project_dir: str, strategy: PersistenceStrategy, names: NameBundle
    ) -> None:
        schema = _join(project_dir, strategy.schema_path() or "")
        if not await self.fs.exists(schema):
            print_warning(
                f"{strategy.schema_path()} not found. Add the {names.class_form} model manually."
            )
            return
        text = await self.fs.read(schema)
        updated = append_section(text, f"model {names.class_form} {{", strategy.render_model(names))
        if updated != text:
            await self.fs.write(schema, updated)

    async def _append_rest_client_readme(self, project_dir: str) -> None:
        readme = _join(project_dir, "README.md")
        if not await self.fs.exists(readme):
            return
        text = await self.fs.read(readme)
        updated = append_section(
            text, REST_CLIENT_MARKER, self.catalog.rest_client_readme_section()
        )
        if updated != text:
            await self.fs.write(readme, updated)

    async def _load_manifest(self, project_dir: str) -> ProjectManifest:
        path = _join(project_dir, self.config.manifest_filename)
        if await self.fs.exists(path):
            return ProjectManifest.from_json(await self.fs.read(path))
        return ProjectManifest(
            name=await self._project_name(project_dir),
            architecture=self.architecture.kind.value,
        )

    async def _save_manifest(self, project_dir: str, manifest: ProjectManifest) -> None:
        await self.fs.write(_join(project_dir, self.config.manifest_filename), manifest.to_json())

    async def _project_name(self, project_dir: str) -> str:
        if project_dir:
            return PurePosixPath(project_dir).name
        if await self.fs.exists("package.json"):
            try:
                data = json.loads(await self.fs.read("package.json"))
            except ValueError:
                data = None
            if isinstance(data, dict) and isinstance(data.get("name"), str) and data["name"]:
                return data["name"]
        return "app"

    def _print_final_summary(self, summary: dict[str, Any]) -> None:
        succeeded = self.state is ScaffoldState.DONE
        print_summary_table(
            {
                "Project": summary["project"],
                "Modules": ", ".join(summary["units"]) or "none",
                "Skipped": ", ".join(summary["dropped"]) or "none",
                "States": " -> ".join(summary["history"]),
            },
            title="Scaffold Summary",
        )
        status = (
            "[bold green]SCAFFOLD SUCCEEDED[/bold green]"
            if succeeded
            else "[bold red]SCAFFOLD FAILED[/bold red]"
        )
        console.print(
            Panel(
                f"{status}\n\nDuration : {summary['duration']}",
                title="[bold]Scaffold Complete[/bold]",
                border_style="bold green" if succeeded else "bold red",
            )
        )


# ---------------------------------------------------------------------------
# Module helpers
# ---------------------------------------------------------------------------


def _join(project_dir: str, path: str) -> str:
    if not project_dir:
        return path
    return str(PurePosixPath(project_dir) / path)


def _active_persistence(manifest: ProjectManifest) -> PersistenceStrategy | None:
    if manifest.persistence is None:
        return None
    return persistence_registry.resolve(manifest.persistence)


def _validate_answer(value: str) -> bool | str:
    return True if is_valid_name(value) else _NAME_HINT


def _project_name_question() -> Question:
    return Question(
        name="name",
        message="What is the name of your project?",
        default=DEFAULT_PROJECT_NAME,
        validate=_validate_answer,
    )
