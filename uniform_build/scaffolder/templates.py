"""Jinja2 template rendering for project scaffolding.

Provides the TemplateRenderer class which loads the fixed Jinja2 templates
shipped in ``uniform_build/scaffolder/templates/`` and renders them with a
context built from the ``ProjectConfig`` and the intermediate
representation.  Templates are part of the package; they are not
user-authored.
"""

from __future__ import annotations

import json
import pprint
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders the scaffolding templates.

    The renderer discovers ``.j2`` template files under a configurable
    template directory.  Undefined variables are errors so that a template
    can never silently emit an empty name.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        # Register custom filters
        self.env.filters["js_path"] = _js_path_filter
        self.env.filters["py_list"] = _py_list_filter
        self.env.filters["json"] = _json_filter
        self.env.filters["py_literal"] = _py_literal_filter

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"backend/app/models.py.j2"``).
            context: Dictionary of variables available inside the template.

        Returns:
            The rendered template content as a string.
        """
        template = self.env.get_template(template_path)
        return template.render(**context)


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------

def _js_path_filter(path: str) -> str:
    """Render an API path as a JS string literal.

    ``/posts`` -> ``'/posts'`` and ``/posts/{id}`` -> ```/posts/${id}```.
    """
    if "{id}" in path:
        return "`" + path.replace("{id}", "${id}") + "`"
    return f"'{path}'"


def _py_list_filter(values: Any) -> str:
    """Render a sequence of strings as a Python list literal."""
    return "[" + ", ".join(f"'{v}'" for v in values) + "]"


def _json_filter(value: Any) -> str:
    return json.dumps(value, indent=2)


def _py_literal_filter(value: Any) -> str:
    """Render plain data (dicts, lists, strings, bools) as a Python literal."""
    return pprint.pformat(value, indent=1, width=88, sort_dicts=False)
