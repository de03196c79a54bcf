"""Jinja2 rendering of the text handed to agents.

Request scripts, request-example reports, and prompt bodies live as
templates under ``specmcp/templates/``. :func:`render` looks them up in a
shared :class:`~jinja2.Environment` built once per process.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

TEMPLATE_DIR = Path(__file__).parent / "templates"
"""Path to the Jinja2 template directory (``specmcp/templates/``)."""


@lru_cache(maxsize=1)
def create_jinja_env() -> Environment:
    """Create the Jinja2 environment for specmcp templates.

    Templates produce Markdown and Python source, never HTML, so autoescape
    is disabled for both extensions. Block trimming and lstrip keep the
    template sources readable. Undefined variables are errors.
    """
    return Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(disabled_extensions=("md.j2", "py.j2")),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )


def render(template_name: str, **context: Any) -> str:
    """Render *template_name* with *context*, without the trailing newline."""
    template = create_jinja_env().get_template(template_name)
    return template.render(**context).rstrip("\n")
