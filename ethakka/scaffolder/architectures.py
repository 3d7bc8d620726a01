"""Backend architectures and their registry."""

from __future__ import annotations

from .models import Registration
from .naming import NameBundle
from .strategies import ArchitectureKind, ArchitectureStrategy, StrategyRegistry


class NestArchitecture(ArchitectureStrategy):
    """NestJS projects: one feature module per unit, wired into ``AppModule``."""

    kind = ArchitectureKind.NEST

    @property
    def display_name(self) -> str:
        return "NestJS"

    @property
    def description(self) -> str:
        return (
            "A progressive Node.js framework for building efficient and "
            "scalable server-side applications."
        )

    @property
    def template_root(self) -> str:
        return "nest"

    @property
    def aggregator_path(self) -> str:
        return "src/app.module.ts"

    @property
    def marker_file(self) -> str:
        return "nest-cli.json"

    @property
    def install_command(self) -> str:
        return "npm install"

    def skeleton_dirs(self) -> list[str]:
        return [
            "src/common/decorators",
            "src/common/filters",
            "src/common/guards",
            "src/common/interceptors",
            "src/common/pipes",
            "test",
        ]

    def unit_dir(self, names: NameBundle) -> str:
        return f"src/{names.plural}"

    def unit_registration(self, names: NameBundle) -> Registration:
        module = f"{names.class_form}Module"
        return Registration(
            import_line=f"import {{ {module} }} from './{names.plural}/{names.plural}.module';",
            identifier=module,
        )

    def auth_dir(self) -> str:
        return "src/auth"

    def auth_registration(self) -> Registration:
        return Registration(
            import_line="import { AuthModule } from './auth/auth.module';",
            identifier="AuthModule",
        )

    def auth_dependencies(self, use_jwt: bool) -> tuple[dict[str, str], dict[str, str]]:
        deps = {
            "@nestjs/passport": "^10.0.0",
            "passport": "^0.6.0",
            "bcrypt": "^5.1.0",
        }
        dev_deps = {"@types/bcrypt": "^5.0.0"}
        if use_jwt:
            deps["@nestjs/jwt"] = "^10.0.0"
            deps["passport-jwt"] = "^4.0.1"
            dev_deps["@types/passport-jwt"] = "^3.0.8"
        return deps, dev_deps


architecture_registry: StrategyRegistry[ArchitectureKind, ArchitectureStrategy] = StrategyRegistry(
    "architecture",
    ArchitectureKind,
    {ArchitectureKind.NEST: NestArchitecture},
    aliases={"nestjs": ArchitectureKind.NEST},
)
