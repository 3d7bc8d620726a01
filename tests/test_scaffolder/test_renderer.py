"""Unit tests for ethakka.scaffolder.renderer.TemplateRenderer."""

from __future__ import annotations

from pathlib import Path

import pytest
from jinja2 import TemplateAssertionError, UndefinedError

from ethakka.scaffolder.renderer import TemplateRenderer

# ---------------------------------------------------------------------------
# Markers
# ---------------------------------------------------------------------------

pytestmark = pytest.mark.unit


class TestTemplateRenderer:
    def test_default_template_dir(self, renderer: TemplateRenderer, templates_dir: Path):
        assert renderer.template_dir == templates_dir

    def test_snake_form_filter(self, tmp_path: Path):
        (tmp_path / "db.j2").write_text("DB_NAME={{ project_name | snake_form }}_dev\n")
        custom = TemplateRenderer(tmp_path)
        assert custom.render("db.j2", {"project_name": "my-shop"}) == "DB_NAME=my_shop_dev\n"

    @pytest.mark.parametrize(
        "name", ["class_form", "property_form", "kebab_form", "pluralize", "singularize"]
    )
    def test_casing_filters_not_registered(self, renderer: TemplateRenderer, name):
        assert name not in renderer.env.filters

    def test_unregistered_filter_fails(self, tmp_path: Path):
        (tmp_path / "bad.j2").write_text("{{ name | class_form }}")
        with pytest.raises(TemplateAssertionError):
            TemplateRenderer(tmp_path).render("bad.j2", {"name": "shop"})

    def test_strict_undefined(self, tmp_path: Path):
        (tmp_path / "missing.j2").write_text("{{ missing }}")
        with pytest.raises(UndefinedError):
            TemplateRenderer(tmp_path).render("missing.j2", {})

    def test_file_templates_are_not_escaped(self, tmp_path: Path):
        (tmp_path / "generic.ts.j2").write_text("Promise<{{ v }}>")
        custom = TemplateRenderer(tmp_path)
        assert custom.render("generic.ts.j2", {"v": "User & 'x'"}) == "Promise<User & 'x'>"

    def test_render_file(self, renderer: TemplateRenderer, invoice):
        out = renderer.render("nest/unit/module.ts.j2", {"names": invoice})
        assert "export class InvoiceModule {}" in out
        assert out.endswith("\n")
