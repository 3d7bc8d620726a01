"""Persistence strategies and their registry.

``memory`` keeps entities in a process-local array inside each generated
service; ``prisma`` generates a Prisma schema, a global ``PrismaModule`` and
services that query the Prisma client.
"""

from __future__ import annotations

from typing import Any

from .models import Registration, RenderedArtifact
from .naming import USER_UNIT, NameBundle
from .renderer import TemplateRenderer
from .strategies import PersistenceKind, PersistenceStrategy, StrategyRegistry


class MemoryPersistence(PersistenceStrategy):
    """In-memory arrays; nothing to install or configure."""

    kind = PersistenceKind.MEMORY

    def __init__(self, renderer: TemplateRenderer | None = None) -> None:
        self.renderer = renderer or TemplateRenderer()

    @property
    def display_name(self) -> str:
        return "In-memory"

    @property
    def description(self) -> str:
        return "Process-local arrays, no database required"

    def dependencies(self) -> dict[str, str]:
        return {}

    def dev_dependencies(self) -> dict[str, str]:
        return {}

    def scripts(self) -> dict[str, str]:
        return {}

    def package_fields(self) -> dict[str, Any]:
        return {}

    def render_config(self, project_name: str) -> list[RenderedArtifact]:
        return []

    def render_model(self, names: NameBundle) -> str:
        return self.renderer.render("memory/model.ts.j2", {"names": names})

    def render_service(self, names: NameBundle) -> str:
        return self.renderer.render("memory/service.ts.j2", {"names": names})

    def render_user_service(self) -> str:
        return self.renderer.render("memory/user.service.ts.j2", {"user": USER_UNIT})

    def registration(self) -> Registration | None:
        return None

    def schema_path(self) -> str | None:
        return None

    def setup_steps(self) -> list[str]:
        return ["Data lives in memory and is lost when the server restarts"]


class PrismaPersistence(PersistenceStrategy):
    """Prisma ORM on PostgreSQL."""

    kind = PersistenceKind.PRISMA

    SCHEMA_PATH = "prisma/schema.prisma"

    def __init__(self, renderer: TemplateRenderer | None = None) -> None:
        self.renderer = renderer or TemplateRenderer()

    @property
    def display_name(self) -> str:
        return "Prisma"

    @property
    def description(self) -> str:
        return "Modern TypeScript ORM"

    def dependencies(self) -> dict[str, str]:
        return {"@prisma/client": "^5.0.0", "bcrypt": "^5.1.0"}

    def dev_dependencies(self) -> dict[str, str]:
        return {"prisma": "^5.0.0", "@types/bcrypt": "^5.0.0"}

    def scripts(self) -> dict[str, str]:
        return {
            "prisma:studio": "prisma studio",
            "prisma:generate": "prisma generate",
            "prisma:migrate": "prisma migrate dev --name",
            "db:seed": "ts-node prisma/seed.ts",
            "db:reset": "prisma migrate reset --force",
        }

    def package_fields(self) -> dict[str, Any]:
        return {"prisma": {"seed": "ts-node prisma/seed.ts"}}

    def render_config(self, project_name: str) -> list[RenderedArtifact]:
        ctx = {"project_name": project_name, "user": USER_UNIT}
        return [
            RenderedArtifact(self.SCHEMA_PATH, self.renderer.render("prisma/schema.prisma.j2", ctx)),
            RenderedArtifact("prisma/seed.ts", self.renderer.render("prisma/seed.ts.j2", ctx)),
            RenderedArtifact(
                "src/prisma/prisma.service.ts",
                self.renderer.render("prisma/prisma.service.ts.j2", ctx),
            ),
            RenderedArtifact(
                "src/prisma/prisma.module.ts",
                self.renderer.render("prisma/prisma.module.ts.j2", ctx),
            ),
        ]

    def render_model(self, names: NameBundle) -> str:
        return self.renderer.render("prisma/model.prisma.j2", {"names": names})

    def render_service(self, names: NameBundle) -> str:
        return self.renderer.render("prisma/service.ts.j2", {"names": names})

    def render_user_service(self) -> str:
        return self.renderer.render("prisma/user.service.ts.j2", {"user": USER_UNIT})

    def registration(self) -> Registration | None:
        return Registration(
            import_line="import { PrismaModule } from './prisma/prisma.module';",
            identifier="PrismaModule",
        )

    def schema_path(self) -> str | None:
        return self.SCHEMA_PATH

    def setup_steps(self) -> list[str]:
        return [
            "Update your .env file with the correct DATABASE_URL",
            "Run npx prisma generate to generate the Prisma client",
            "Run npx prisma migrate dev to create your first migration",
        ]


persistence_registry: StrategyRegistry[PersistenceKind, PersistenceStrategy] = StrategyRegistry(
    "persistence strategy",
    PersistenceKind,
    {
        PersistenceKind.MEMORY: MemoryPersistence,
        PersistenceKind.PRISMA: PrismaPersistence,
    },
    aliases={"in-memory": PersistenceKind.MEMORY, "none": PersistenceKind.MEMORY},
)
