"""Ethakka configuration.

Centralised, typed configuration for the scaffolder plus the per-project
manifest that records what has been generated so far.  All settings use
Pydantic v2 models so they can be validated at construction time and
serialised to/from JSON or environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

MANIFEST_FILENAME = ".ethakka.json"


class GeneratedAppConfig(BaseModel):
    """Values baked into the generated application's files."""

    port: int = Field(default=3000, ge=1, le=65535)
    api_prefix: str = Field(default="api")
    allowed_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:4200"]
    )
    jwt_expiration: str = Field(default="1h")
    jwt_refresh_expiration: str = Field(default="7d")


class ScaffoldConfig(BaseModel):
    """Global scaffolder configuration.

    Instances are typically created once by the CLI entry point and then
    passed to the ``Scaffolder``.
    """

    root_dir: Path = Field(default=Path("."))
    default_architecture: str = Field(default="nest")
    install_command: str | None = Field(
        default=None, description="Overrides the architecture's install command"
    )
    install_timeout: int = Field(default=600, ge=10, description="Install timeout in seconds")
    run_install: bool = Field(
        default=True, description="Whether composite workflows run the install command"
    )
    manifest_filename: str = Field(default=MANIFEST_FILENAME)
    app: GeneratedAppConfig = Field(default_factory=GeneratedAppConfig)

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file and return *path*."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return path

    @classmethod
    def load(cls, path: Path) -> "ScaffoldConfig":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "ScaffoldConfig":
        """Build a ``ScaffoldConfig`` from environment variables.

        Recognised variables (all optional):
            ETHAKKA_ROOT_DIR, ETHAKKA_ARCHITECTURE, ETHAKKA_INSTALL_COMMAND,
            ETHAKKA_INSTALL_TIMEOUT, ETHAKKA_SKIP_INSTALL, ETHAKKA_APP_PORT,
            ETHAKKA_API_PREFIX.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("ETHAKKA_ROOT_DIR"):
            kwargs["root_dir"] = Path(os.environ["ETHAKKA_ROOT_DIR"])
        if os.environ.get("ETHAKKA_ARCHITECTURE"):
            kwargs["default_architecture"] = os.environ["ETHAKKA_ARCHITECTURE"]
        if os.environ.get("ETHAKKA_INSTALL_COMMAND"):
            kwargs["install_command"] = os.environ["ETHAKKA_INSTALL_COMMAND"]
        if os.environ.get("ETHAKKA_INSTALL_TIMEOUT"):
            kwargs["install_timeout"] = int(os.environ["ETHAKKA_INSTALL_TIMEOUT"])
        if os.environ.get("ETHAKKA_SKIP_INSTALL", "").lower() in ("1", "true", "yes"):
            kwargs["run_install"] = False

        app_kwargs: dict[str, Any] = {}
        if os.environ.get("ETHAKKA_APP_PORT"):
            app_kwargs["port"] = int(os.environ["ETHAKKA_APP_PORT"])
        if os.environ.get("ETHAKKA_API_PREFIX"):
            app_kwargs["api_prefix"] = os.environ["ETHAKKA_API_PREFIX"]

        return cls(app=GeneratedAppConfig(**app_kwargs), **kwargs)


class ProjectManifest(BaseModel):
    """What has been scaffolded into one project.

    Persisted at ``<project>/.ethakka.json`` so later invocations (e.g. a
    ``module`` command after ``db``) can find the active persistence strategy.
    """

    name: str
    architecture: str = Field(default="nest")
    persistence: str | None = Field(default=None)
    auth: bool = Field(default=False)
    units: list[str] = Field(default_factory=list)

    def with_unit(self, plural: str) -> "ProjectManifest":
        """Return a copy with *plural* recorded (no duplicates)."""
        if plural in self.units:
            return self
        return self.model_copy(update={"units": [*self.units, plural]})

    def to_json(self) -> str:
        return self.model_dump_json(indent=2) + "\n"

    @classmethod
    def from_json(cls, raw: str) -> "ProjectManifest":
        return cls.model_validate_json(raw)
