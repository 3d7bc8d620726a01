"""Unit tests for ethakka.scaffolder.patcher."""

from __future__ import annotations

import pytest

from ethakka.errors import AnchorNotFound
from ethakka.scaffolder.patcher import (
    RegistrationTarget,
    append_section,
    contains_identifier,
    patch,
)

# ---------------------------------------------------------------------------
# Markers
# ---------------------------------------------------------------------------

pytestmark = pytest.mark.unit

FOO_IMPORT = "import { FooModule } from './foo/foo.module';"
BAR_IMPORT = "import { BarModule } from './bar/bar.module';"

EMPTY_AGGREGATOR = """import { Module } from '@nestjs/common';

@Module({
  imports: [],
  controllers: [],
  providers: [],
})
export class AppModule {}
"""

MULTILINE_AGGREGATOR = """import { Module } from '@nestjs/common';
import { ConfigModule } from '@nestjs/config';

@Module({
  imports: [
    ConfigModule.forRoot({
      isGlobal: true,
      envFilePath: ['.env', `.env.${process.env.NODE_ENV || 'development'}`],
    }),
  ],
  controllers: [],
  providers: [],
})
export class AppModule {}
"""

INLINE_AGGREGATOR = """import { Module } from '@nestjs/common';
import { AModule } from './a/a.module';
import { BModule } from './b/b.module';
import { CModule } from './c/c.module';

@Module({
  imports: [AModule, BModule.forRoot({ a: 1, b: [2, 3] }), CModule],
  controllers: [],
  providers: [],
})
export class AppModule {}
"""


# ---------------------------------------------------------------------------
# Scanning
# ---------------------------------------------------------------------------


class TestRegistrationTarget:
    def test_scan_empty_list(self):
        target = RegistrationTarget.scan(EMPTY_AGGREGATOR)
        assert target.import_lines == ("import { Module } from '@nestjs/common';",)
        assert target.has_registration_list
        assert target.is_empty_list
        assert target.entries == ()

    def test_scan_nested_entries(self):
        target = RegistrationTarget.scan(MULTILINE_AGGREGATOR)
        assert len(target.import_lines) == 2
        assert not target.is_empty_list
        assert len(target.entries) == 1
        assert target.entries[0].startswith("ConfigModule.forRoot(")

    def test_scan_without_list(self):
        target = RegistrationTarget.scan("import { Module } from '@nestjs/common';\n")
        assert not target.has_registration_list
        assert target.entries == ()

    def test_scan_splits_top_level_commas_only(self):
        text = "imports: [A, B.forRoot({ a: 1, b: [2, 3] }), 'x,y'],"
        target = RegistrationTarget.scan(text)
        assert target.entries == ("A", "B.forRoot({ a: 1, b: [2, 3] })", "'x,y'")


# ---------------------------------------------------------------------------
# patch()
# ---------------------------------------------------------------------------


class TestPatch:
    def test_empty_list(self):
        result = patch(EMPTY_AGGREGATOR, FOO_IMPORT, "FooModule")
        assert result.changed
        assert result.warning is None
        assert "imports: [FooModule]," in result.text
        assert result.text.count(FOO_IMPORT) == 1
        assert result.text.count("FooModule") == 2

    def test_import_follows_last_import(self):
        result = patch(MULTILINE_AGGREGATOR, FOO_IMPORT, "FooModule")
        lines = result.text.splitlines()
        assert lines[2] == FOO_IMPORT
        assert lines[1] == "import { ConfigModule } from '@nestjs/config';"

    def test_multiline_list_keeps_existing_entries(self):
        result = patch(MULTILINE_AGGREGATOR, FOO_IMPORT, "FooModule")
        assert "  imports: [\n    FooModule,\n    ConfigModule.forRoot({" in result.text
        assert "isGlobal: true" in result.text
        target = RegistrationTarget.scan(result.text)
        assert target.entries[0] == "FooModule"
        assert len(target.entries) == 2

    def test_inline_list(self):
        text = "import { A } from './a';\n\n@Module({ imports: [AModule], providers: [] })\n"
        result = patch(text, FOO_IMPORT, "FooModule")
        assert "imports: [FooModule, AModule]" in result.text

    def test_idempotent(self):
        once = patch(EMPTY_AGGREGATOR, FOO_IMPORT, "FooModule")
        twice = patch(once.text, FOO_IMPORT, "FooModule")
        assert not twice.changed
        assert twice.text == once.text

    def test_two_units(self):
        text = patch(EMPTY_AGGREGATOR, FOO_IMPORT, "FooModule").text
        text = patch(text, BAR_IMPORT, "BarModule").text
        assert text.count(FOO_IMPORT) == 1
        assert text.count(BAR_IMPORT) == 1
        target = RegistrationTarget.scan(text)
        assert set(target.entries) == {"FooModule", "BarModule"}

    def test_identifier_prefix_is_not_a_match(self):
        text = patch(EMPTY_AGGREGATOR, "import { FooBarModule } from './x';", "FooBarModule").text
        result = patch(text, FOO_IMPORT, "FooModule")
        assert result.changed
        assert "FooModule" in RegistrationTarget.scan(result.text).entries

    def test_missing_anchor_returns_warning(self):
        text = "import { Module } from '@nestjs/common';\n\nexport class AppModule {}\n"
        result = patch(text, FOO_IMPORT, "FooModule")
        assert result.changed
        assert isinstance(result.warning, AnchorNotFound)
        assert result.warning.identifier == "FooModule"
        assert FOO_IMPORT in result.text

    def test_no_existing_imports(self):
        result = patch("@Module({\n  imports: [],\n})\n", FOO_IMPORT, "FooModule")
        assert result.text.startswith(FOO_IMPORT + "\n")
        assert "imports: [FooModule]," in result.text

    def test_existing_content_is_never_removed(self):
        result = patch(MULTILINE_AGGREGATOR, FOO_IMPORT, "FooModule")
        for line in MULTILINE_AGGREGATOR.splitlines():
            assert line in result.text

    def test_inline_list_only_grows(self):
        text = INLINE_AGGREGATOR
        before = RegistrationTarget.scan(text)
        for import_line, identifier in [(FOO_IMPORT, "FooModule"), (BAR_IMPORT, "BarModule")]:
            text = patch(text, import_line, identifier).text
            after = RegistrationTarget.scan(text)
            assert set(after.entries) == set(before.entries) | {identifier}
            assert len(after.entries) == len(before.entries) + 1
            assert set(before.import_lines) <= set(after.import_lines)
            before = after
        assert after.entries.count("BModule.forRoot({ a: 1, b: [2, 3] })") == 1


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestHelpers:
    def test_contains_identifier_is_token_based(self):
        assert contains_identifier("imports: [FooModule]", "FooModule")
        assert not contains_identifier("imports: [FooModuleX]", "FooModule")
        assert not contains_identifier("imports: [$FooModule]", "FooModule")

    def test_append_section(self):
        result = append_section("# Title\n", "## Extra", "## Extra\n\nBody")
        assert result == "# Title\n\n## Extra\n\nBody\n"

    def test_append_section_is_idempotent(self):
        once = append_section("# Title\n", "## Extra", "## Extra\n")
        assert append_section(once, "## Extra", "## Extra\n") == once

    def test_append_section_to_empty_text(self):
        assert append_section("", "model A {", "model A {\n}\n") == "model A {\n}\n"
