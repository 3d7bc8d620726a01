"""Jinja2 template rendering for generated projects.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``ethakka/scaffolder/templates/`` directory and renders them with a context
dictionary.  Rendering is pure: the renderer returns strings and never
touches the project tree.  Writing is the orchestrator's job.

Unit identifiers reach templates only through a ``NameBundle``; the single
``snake_form`` filter exists for the project name in the env templates.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from .naming import to_snake_form

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


class TemplateRenderer:
    """Renders Jinja2 templates shipped with the scaffolder.

    Undefined variables raise instead of rendering as empty strings, so a
    template that references a name the caller did not supply fails loudly.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["snake_form"] = to_snake_form

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"nest/unit/module.ts.j2"``).
            context: Dictionary of variables available inside the template.

        Returns:
            The rendered template content as a string.
        """
        template = self.env.get_template(template_path)
        return template.render(**context)
