"""Name normalisation for scaffolded units.

Every identifier the templates need (directory names, class names, property
names, file stems) is derived here from a single user-supplied token, so the
generated files always agree with each other.

Pluralisation is a small suffix heuristic, not a dictionary: irregular nouns
such as ``person``/``people`` are not handled.
"""

from __future__ import annotations

import re
from dataclasses import astuple, dataclass

from ethakka.errors import NameValidationError

NAME_PATTERN = r"^[a-z0-9_-]+$"
_NAME_RE = re.compile(NAME_PATTERN)
_LETTER_RE = re.compile(r"[a-z]")

_CAMEL_BOUNDARY_RE = re.compile(r"([a-z])([A-Z])")
_WORD_BOUNDARY_RE = re.compile(r"(?<=[a-zA-Z0-9])(?=[A-Z])")
_WORD_SPLIT_RE = re.compile(r"[-_\s]+")


@dataclass(frozen=True)
class NameBundle:
    """All identifier forms derived from one raw token."""

    raw: str
    singular: str
    plural: str
    class_form: str
    property_form: str
    kebab_form: str
    snake_form: str


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def is_valid_name(raw: str) -> bool:
    """Return ``True`` if *raw* is a lowercase token usable as a unit name.

    Besides matching ``NAME_PATTERN`` the token needs at least one letter and
    must normalise to a bundle without empty forms: ``s`` singularises to
    nothing and ``-`` has no class form.
    """
    if not (_NAME_RE.match(raw) and _LETTER_RE.search(raw)):
        return False
    return all(astuple(normalize(raw)))


def validate_name(raw: str) -> str:
    """Return *raw* unchanged, or raise ``NameValidationError``."""
    if not is_valid_name(raw):
        raise NameValidationError(raw, NAME_PATTERN)
    return raw


# ---------------------------------------------------------------------------
# Casing
# ---------------------------------------------------------------------------


def _words(value: str) -> list[str]:
    spaced = _WORD_BOUNDARY_RE.sub(" ", value)
    return [w for w in _WORD_SPLIT_RE.split(spaced) if w]


def to_class_form(value: str) -> str:
    """Convert ``order-item`` or ``order_item`` to ``OrderItem``."""
    return "".join(w[0].upper() + w[1:].lower() for w in _words(value))


def to_property_form(value: str) -> str:
    """Convert ``order-item`` to ``orderItem``."""
    pascal = to_class_form(value)
    if pascal:
        return pascal[0].lower() + pascal[1:]
    return ""


def to_kebab_form(value: str) -> str:
    """Convert ``OrderItem`` or ``order_item`` to ``order-item``."""
    s1 = _CAMEL_BOUNDARY_RE.sub(r"\1-\2", value)
    return re.sub(r"[\s_]+", "-", s1).lower()


def to_snake_form(value: str) -> str:
    """Convert ``OrderItem`` or ``order-item`` to ``order_item``."""
    s1 = _CAMEL_BOUNDARY_RE.sub(r"\1_\2", value)
    return re.sub(r"[\s-]+", "_", s1).lower()


# ---------------------------------------------------------------------------
# Number
# ---------------------------------------------------------------------------


def pluralize(word: str) -> str:
    """Return the plural of *word*.

    ``category`` -> ``categories``; ``class`` -> ``classs``; a word already
    ending in a single ``s`` is treated as plural and returned unchanged.
    """
    if word.endswith("y"):
        return word[:-1] + "ies"
    if word.endswith("ss"):
        return word + "s"
    if word.endswith("s"):
        return word
    return word + "s"


def singularize(word: str) -> str:
    """Return the singular of *word*; the inverse of :func:`pluralize`."""
    if word.endswith("ies"):
        return word[:-3] + "y"
    if word.endswith("sss"):
        return word[:-1]
    if word.endswith("ss"):
        return word
    if word.endswith("s"):
        return word[:-1]
    return word


# ---------------------------------------------------------------------------
# Bundle
# ---------------------------------------------------------------------------


def normalize(raw: str) -> NameBundle:
    """Derive every identifier form from *raw*.

    The plural is computed first and the singular is derived back from it,
    so ``normalize("invoice")`` and ``normalize("invoices")`` produce the same
    bundle apart from ``raw``.
    """
    plural = pluralize(raw)
    singular = singularize(plural)
    return NameBundle(
        raw=raw,
        singular=singular,
        plural=plural,
        class_form=to_class_form(singular),
        property_form=to_property_form(singular),
        kebab_form=to_kebab_form(singular),
        snake_form=to_snake_form(singular),
    )


# The user unit synthesised for authentication.
USER_UNIT = normalize("user")
