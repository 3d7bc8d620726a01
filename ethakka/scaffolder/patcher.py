"""Idempotent wiring of new units into an aggregator file.

The aggregator (``src/app.module.ts`` for NestJS projects) has two shapes the
patcher relies on:

* a block of top-level ``import ... ;`` statements, and
* a registration list ``imports: [ ... ]`` whose canonical empty form is
  ``imports: []``.

``patch`` adds one import line and one registration entry.  It never removes
or reorders existing content, and applying it twice with the same identifier
is a no-op.  When the registration list cannot be found the import is still
added and an ``AnchorNotFound`` warning is returned instead of raised.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from ethakka.errors import AnchorNotFound

REGISTRATION_ANCHOR = "imports: ["
EMPTY_REGISTRATION = "imports: []"

_IMPORT_RE = re.compile(r"^import\b[^;]*;", re.MULTILINE)
_REGISTRATION_RE = re.compile(r"imports:\s*\[")

_OPENERS = {"[": "]", "(": ")", "{": "}"}
_CLOSERS = {"]", ")", "}"}
_QUOTES = {"'", '"', "`"}


# ---------------------------------------------------------------------------
# Scanned view of an aggregator
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RegistrationTarget:
    """Imports and registration entries found in an aggregator's text.

    Offsets index into ``text``; ``list_open`` is the position just after the
    opening bracket and ``list_close`` the position of the closing bracket.
    """

    text: str
    import_lines: tuple[str, ...]
    import_end: int | None
    anchor_start: int | None
    list_open: int | None
    list_close: int | None
    entries: tuple[str, ...]

    @property
    def has_registration_list(self) -> bool:
        return self.list_open is not None and self.list_close is not None

    @property
    def is_empty_list(self) -> bool:
        return self.has_registration_list and not self.entries

    @classmethod
    def scan(cls, text: str) -> "RegistrationTarget":
        """Scan *text* for its import statements and registration list."""
        imports = list(_IMPORT_RE.finditer(text))
        import_lines = tuple(m.group(0) for m in imports)
        import_end = imports[-1].end() if imports else None

        anchor_start = list_open = list_close = None
        entries: tuple[str, ...] = ()
        match = _REGISTRATION_RE.search(text, import_end or 0)
        if match:
            close = _find_closing_bracket(text, match.end())
            if close is not None:
                anchor_start = match.start()
                list_open = match.end()
                list_close = close
                entries = tuple(_split_entries(text[list_open:list_close]))

        return cls(
            text=text,
            import_lines=import_lines,
            import_end=import_end,
            anchor_start=anchor_start,
            list_open=list_open,
            list_close=list_close,
            entries=entries,
        )


@dataclass(frozen=True)
class PatchResult:
    """Outcome of a patch: the new text and any non-fatal warning."""

    text: str
    changed: bool
    warning: AnchorNotFound | None = None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def contains_identifier(text: str, identifier: str) -> bool:
    """Return ``True`` if *identifier* occurs in *text* as a whole token."""
    return re.search(rf"(?<![\w$]){re.escape(identifier)}(?![\w$])", text) is not None


def patch(aggregator_text: str, import_line: str, identifier: str) -> PatchResult:
    """Add *import_line* and register *identifier* in *aggregator_text*.

    Args:
        aggregator_text: Current content of the aggregator file.
        import_line: Full import statement, e.g.
            ``import { FooModule } from './foo/foo.module';``.
        identifier: Entry to add to the registration list, e.g. ``FooModule``.

    Returns:
        A ``PatchResult``.  ``changed`` is ``False`` when *identifier* was
        already present, in which case the text is returned untouched.
    """
    if contains_identifier(aggregator_text, identifier):
        return PatchResult(text=aggregator_text, changed=False)

    text = _insert_import(RegistrationTarget.scan(aggregator_text), import_line)

    target = RegistrationTarget.scan(text)
    if not target.has_registration_list:
        return PatchResult(
            text=text,
            changed=True,
            warning=AnchorNotFound(identifier, REGISTRATION_ANCHOR),
        )

    return PatchResult(text=_insert_entry(target, identifier), changed=True)


def append_section(text: str, marker: str, section: str) -> str:
    """Append *section* to *text* unless *marker* is already present."""
    if marker in text:
        return text
    body = text.rstrip("\n")
    if not section.endswith("\n"):
        section += "\n"
    if not body:
        return section
    return f"{body}\n\n{section}"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _insert_import(target: RegistrationTarget, import_line: str) -> str:
    text = target.text
    if target.import_end is None:
        return f"{import_line}\n{text}"
    end = target.import_end
    return f"{text[:end]}\n{import_line}{text[end:]}"


def _insert_entry(target: RegistrationTarget, identifier: str) -> str:
    text = target.text
    assert target.anchor_start is not None
    assert target.list_open is not None and target.list_close is not None

    if target.is_empty_list:
        return (
            text[: target.anchor_start]
            + f"imports: [{identifier}]"
            + text[target.list_close + 1 :]
        )

    inner = text[target.list_open : target.list_close]
    if inner.startswith(("\n", "\r\n")):
        indent = _leading_indent(inner)
        insertion = f"\n{indent}{identifier},"
    else:
        insertion = f"{identifier}, "
    return text[: target.list_open] + insertion + text[target.list_open :]


def _leading_indent(inner: str) -> str:
    for line in inner.splitlines():
        if line.strip():
            return line[: len(line) - len(line.lstrip())]
    return "    "


def _find_closing_bracket(text: str, start: int) -> int | None:
    """Return the index of the ``]`` matching an opening bracket at ``start - 1``."""
    stack = ["]"]
    i = start
    while i < len(text):
        ch = text[i]
        if ch in _QUOTES:
            i = _skip_string(text, i)
            continue
        if ch in _OPENERS:
            stack.append(_OPENERS[ch])
        elif ch in _CLOSERS:
            if ch != stack[-1]:
                return None
            stack.pop()
            if not stack:
                return i
        i += 1
    return None


def _skip_string(text: str, start: int) -> int:
    quote = text[start]
    i = start + 1
    while i < len(text):
        if text[i] == "\\":
            i += 2
            continue
        if text[i] == quote:
            return i + 1
        i += 1
    return i


def _split_entries(inner: str) -> list[str]:
    """Split a registration list body on top-level commas."""
    entries: list[str] = []
    depth = 0
    current = 0
    i = 0
    while i < len(inner):
        ch = inner[i]
        if ch in _QUOTES:
            i = _skip_string(inner, i)
            continue
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth -= 1
        elif ch == "," and depth == 0:
            entries.append(inner[current:i])
            current = i + 1
        i += 1
    entries.append(inner[current:])
    return [e.strip() for e in entries if e.strip()]
