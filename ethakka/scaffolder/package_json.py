"""Declaring dependencies and scripts in a generated ``package.json``.

The merge is additive: entries already present keep their value, so a
version a developer pinned by hand is never replaced.  Each touched section
is written back with sorted keys so repeated runs produce identical files.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any


def declare_dependencies(
    text: str,
    dependencies: Mapping[str, str] | None = None,
    dev_dependencies: Mapping[str, str] | None = None,
    scripts: Mapping[str, str] | None = None,
    fields: Mapping[str, Any] | None = None,
) -> str:
    """Return *text* (a ``package.json`` document) with the given entries added.

    Raises:
        ValueError: If *text* is not a JSON object.
    """
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("package.json must contain a JSON object")

    for section, entries in (
        ("dependencies", dependencies),
        ("devDependencies", dev_dependencies),
        ("scripts", scripts),
    ):
        if not entries:
            continue
        current = dict(data.get(section) or {})
        for name, value in entries.items():
            current.setdefault(name, value)
        data[section] = dict(sorted(current.items()))

    for key, value in (fields or {}).items():
        data.setdefault(key, value)

    return json.dumps(data, indent=2) + "\n"
