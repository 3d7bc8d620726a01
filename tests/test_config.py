"""Unit tests for ScaffoldConfig and related Pydantic models (ethakka.config).

Tests cover:
- GeneratedAppConfig defaults and validation
- ScaffoldConfig defaults, save/load, from_env
- ProjectManifest unit recording and JSON round-trip
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from ethakka.config import (
    MANIFEST_FILENAME,
    GeneratedAppConfig,
    ProjectManifest,
    ScaffoldConfig,
)


# ---------------------------------------------------------------------------
# GeneratedAppConfig
# ---------------------------------------------------------------------------


class TestGeneratedAppConfig:
    @pytest.mark.unit
    def test_defaults(self):
        app = GeneratedAppConfig()
        assert app.port == 3000
        assert app.api_prefix == "api"
        assert "http://localhost:4200" in app.allowed_origins
        assert app.jwt_expiration == "1h"

    @pytest.mark.unit
    def test_port_out_of_range(self):
        with pytest.raises(ValidationError):
            GeneratedAppConfig(port=70000)


# ---------------------------------------------------------------------------
# ScaffoldConfig
# ---------------------------------------------------------------------------


class TestScaffoldConfig:
    @pytest.mark.unit
    def test_defaults(self):
        config = ScaffoldConfig()
        assert config.root_dir == Path(".")
        assert config.default_architecture == "nest"
        assert config.install_command is None
        assert config.run_install is True
        assert config.manifest_filename == MANIFEST_FILENAME

    @pytest.mark.unit
    def test_timeout_lower_bound(self):
        with pytest.raises(ValidationError):
            ScaffoldConfig(install_timeout=1)

    @pytest.mark.unit
    def test_save_and_load(self, tmp_path: Path):
        config = ScaffoldConfig(
            install_command="pnpm install",
            app=GeneratedAppConfig(port=8080),
        )
        path = config.save(tmp_path / "nested" / "ethakka.json")
        assert path.exists()
        assert json.loads(path.read_text())["install_command"] == "pnpm install"

        loaded = ScaffoldConfig.load(path)
        assert loaded.install_command == "pnpm install"
        assert loaded.app.port == 8080

    @pytest.mark.unit
    def test_from_env_defaults(self, monkeypatch):
        for var in (
            "ETHAKKA_ROOT_DIR",
            "ETHAKKA_ARCHITECTURE",
            "ETHAKKA_INSTALL_COMMAND",
            "ETHAKKA_INSTALL_TIMEOUT",
            "ETHAKKA_SKIP_INSTALL",
            "ETHAKKA_APP_PORT",
            "ETHAKKA_API_PREFIX",
        ):
            monkeypatch.delenv(var, raising=False)
        assert ScaffoldConfig.from_env() == ScaffoldConfig()

    @pytest.mark.unit
    def test_from_env(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv("ETHAKKA_ROOT_DIR", str(tmp_path))
        monkeypatch.setenv("ETHAKKA_ARCHITECTURE", "nestjs")
        monkeypatch.setenv("ETHAKKA_INSTALL_COMMAND", "yarn")
        monkeypatch.setenv("ETHAKKA_INSTALL_TIMEOUT", "120")
        monkeypatch.setenv("ETHAKKA_SKIP_INSTALL", "true")
        monkeypatch.setenv("ETHAKKA_APP_PORT", "4000")
        monkeypatch.setenv("ETHAKKA_API_PREFIX", "v2")

        config = ScaffoldConfig.from_env()
        assert config.root_dir == tmp_path
        assert config.default_architecture == "nestjs"
        assert config.install_command == "yarn"
        assert config.install_timeout == 120
        assert config.run_install is False
        assert config.app.port == 4000
        assert config.app.api_prefix == "v2"


# ---------------------------------------------------------------------------
# ProjectManifest
# ---------------------------------------------------------------------------


class TestProjectManifest:
    @pytest.mark.unit
    def test_with_unit(self):
        manifest = ProjectManifest(name="shop")
        updated = manifest.with_unit("invoices").with_unit("invoices").with_unit("users")
        assert updated.units == ["invoices", "users"]
        assert manifest.units == []

    @pytest.mark.unit
    def test_json_round_trip(self):
        manifest = ProjectManifest(name="shop", persistence="prisma", auth=True, units=["users"])
        text = manifest.to_json()
        assert text.endswith("\n")
        assert ProjectManifest.from_json(text) == manifest

    @pytest.mark.unit
    def test_requires_name(self):
        with pytest.raises(ValidationError):
            ProjectManifest.from_json("{}")
