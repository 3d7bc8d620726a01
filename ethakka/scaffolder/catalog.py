"""Template catalog: maps names and feature flags to rendered artifacts.

Every method is a pure function of its arguments: it renders templates and
returns ``RenderedArtifact`` objects in a fixed order, leaving all file
writes to the ``Scaffolder``.
"""

from __future__ import annotations

from dataclasses import fields
from typing import Any

from ethakka.config import GeneratedAppConfig

from .environment import render_environment
from .models import FeatureFlags, RenderedArtifact
from .naming import USER_UNIT, NameBundle
from .renderer import TemplateRenderer
from .strategies import ArchitectureStrategy, PersistenceStrategy

REST_CLIENT_DIR = ".vscode/rest-client"
REST_CLIENT_MARKER = "## VS Code REST Client"

# Built-in CRUD service used when no persistence strategy is active
_BUILTIN_SERVICE_TEMPLATE = "memory/service.ts.j2"


class TemplateCatalog:
    """Renders the artifact groups of one architecture.

    Args:
        architecture: Supplies the template root and project layout.
        renderer: Jinja2 renderer; a default one is created when omitted.
        app: Values baked into generated configuration (port, prefix, ...).
    """

    def __init__(
        self,
        architecture: ArchitectureStrategy,
        renderer: TemplateRenderer | None = None,
        app: GeneratedAppConfig | None = None,
    ) -> None:
        self.architecture = architecture
        self.renderer = renderer or TemplateRenderer()
        self.app = app or GeneratedAppConfig()

    # ------------------------------------------------------------------
    # Units
    # ------------------------------------------------------------------

    def render(
        self,
        names: NameBundle,
        flags: FeatureFlags,
        strategy: PersistenceStrategy | None = None,
    ) -> list[RenderedArtifact]:
        """Render the files of one unit.

        Args:
            names: Fully populated name bundle for the unit.
            flags: ``include_crud`` selects the five-operation handler, the
                DTO files and a CRUD service.
            strategy: Active persistence strategy.  Only consulted for the
                CRUD service; without one the built-in in-memory service is
                rendered.

        Raises:
            TypeError: If any field of *names* is missing or empty.
        """
        _require_complete(names)
        ctx = self._context(names=names, flags=flags)
        unit_dir = self.architecture.unit_dir(names)
        root = f"{self.architecture.template_root}/unit"

        if flags.include_crud:
            if strategy is not None:
                service = strategy.render_service(names)
            else:
                service = self.renderer.render(_BUILTIN_SERVICE_TEMPLATE, ctx)
        else:
            service = self.renderer.render(f"{root}/service.ts.j2", ctx)

        artifacts = [
            RenderedArtifact(
                f"{unit_dir}/{names.plural}.module.ts",
                self.renderer.render(f"{root}/module.ts.j2", ctx),
            ),
            RenderedArtifact(
                f"{unit_dir}/{names.plural}.controller.ts",
                self.renderer.render(f"{root}/controller.ts.j2", ctx),
            ),
            RenderedArtifact(f"{unit_dir}/{names.plural}.service.ts", service),
            RenderedArtifact(
                f"{unit_dir}/entities/{names.kebab_form}.entity.ts",
                self.renderer.render(f"{root}/entity.ts.j2", ctx),
            ),
        ]
        if flags.include_crud:
            artifacts += [
                RenderedArtifact(
                    f"{unit_dir}/dto/create-{names.kebab_form}.dto.ts",
                    self.renderer.render(f"{root}/create-dto.ts.j2", ctx),
                ),
                RenderedArtifact(
                    f"{unit_dir}/dto/update-{names.kebab_form}.dto.ts",
                    self.renderer.render(f"{root}/update-dto.ts.j2", ctx),
                ),
            ]
        return artifacts

    def render_rest_client(self, names: NameBundle) -> RenderedArtifact:
        """REST Client requests exercising the five CRUD operations of a unit."""
        _require_complete(names)
        return RenderedArtifact(
            f"{REST_CLIENT_DIR}/{names.plural}.http",
            self.renderer.render(
                f"{self.architecture.template_root}/rest-client/unit.http.j2",
                self._context(names=names),
            ),
        )

    # ------------------------------------------------------------------
    # Project skeleton
    # ------------------------------------------------------------------

    def render_project(self, project_name: str) -> list[RenderedArtifact]:
        """Skeleton files of a new project (environment files excluded)."""
        root = f"{self.architecture.template_root}/project"
        ctx = self._context(project_name=project_name)
        layout = [
            ("src/main.ts", "main.ts.j2"),
            (self.architecture.aggregator_path, "app.module.ts.j2"),
            ("src/config/env.config.ts", "env.config.ts.j2"),
            ("package.json", "package.json.j2"),
            ("tsconfig.json", "tsconfig.json.j2"),
            ("tsconfig.build.json", "tsconfig.build.json.j2"),
            (self.architecture.marker_file, "nest-cli.json.j2"),
            (".gitignore", "gitignore.j2"),
            ("README.md", "README.md.j2"),
        ]
        return [
            RenderedArtifact(path, self.renderer.render(f"{root}/{template}", ctx))
            for path, template in layout
        ]

    def render_environment(self, project_name: str) -> list[RenderedArtifact]:
        return render_environment(
            self.renderer, self.architecture.template_root, project_name, self.app
        )

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def render_auth(self, use_jwt: bool) -> list[RenderedArtifact]:
        """Auth module files; the JWT strategy, guard and decorator only with *use_jwt*."""
        root = f"{self.architecture.template_root}/auth"
        auth_dir = self.architecture.auth_dir()
        ctx = self._context(use_jwt=use_jwt, user=USER_UNIT)
        layout = [
            (f"{auth_dir}/auth.module.ts", "auth.module.ts.j2"),
            (f"{auth_dir}/controllers/auth.controller.ts", "auth.controller.ts.j2"),
            (f"{auth_dir}/services/auth.service.ts", "auth.service.ts.j2"),
            (f"{auth_dir}/dto/register.dto.ts", "register.dto.ts.j2"),
            (f"{auth_dir}/dto/login.dto.ts", "login.dto.ts.j2"),
        ]
        if use_jwt:
            layout += [
                (f"{auth_dir}/strategies/jwt.strategy.ts", "jwt.strategy.ts.j2"),
                (f"{auth_dir}/guards/jwt-auth.guard.ts", "jwt-auth.guard.ts.j2"),
                ("src/common/decorators/current-user.decorator.ts", "current-user.decorator.ts.j2"),
            ]
        return [
            RenderedArtifact(path, self.renderer.render(f"{root}/{template}", ctx))
            for path, template in layout
        ]

    def render_auth_rest_client(self) -> RenderedArtifact:
        return RenderedArtifact(
            f"{REST_CLIENT_DIR}/auth.http",
            self.renderer.render(
                f"{self.architecture.template_root}/rest-client/auth.http.j2",
                self._context(),
            ),
        )

    def render_user_unit(self, strategy: PersistenceStrategy | None = None) -> list[RenderedArtifact]:
        """The user unit backing authentication.

        Its service comes from *strategy* (in-memory when ``None``) and offers
        ``create``, ``findByEmail`` and ``findById``.
        """
        root = f"{self.architecture.template_root}/user"
        unit_dir = self.architecture.unit_dir(USER_UNIT)
        ctx = self._context(user=USER_UNIT)
        if strategy is not None:
            service = strategy.render_user_service()
        else:
            service = self.renderer.render("memory/user.service.ts.j2", ctx)
        return [
            RenderedArtifact(
                f"{unit_dir}/{USER_UNIT.plural}.module.ts",
                self.renderer.render(f"{root}/module.ts.j2", ctx),
            ),
            RenderedArtifact(f"{unit_dir}/{USER_UNIT.plural}.service.ts", service),
            RenderedArtifact(
                f"{unit_dir}/entities/{USER_UNIT.kebab_form}.entity.ts",
                self.renderer.render(f"{root}/entity.ts.j2", ctx),
            ),
        ]

    def rest_client_readme_section(self) -> str:
        return self.renderer.render(
            f"{self.architecture.template_root}/rest-client/readme-section.md.j2",
            self._context(),
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _context(self, **values: Any) -> dict[str, Any]:
        return {"app": self.app, **values}


def _require_complete(names: NameBundle) -> None:
    for field in fields(names):
        value = getattr(names, field.name)
        if not isinstance(value, str) or not value:
            raise TypeError(f"NameBundle.{field.name} is missing for '{names.raw}'")
