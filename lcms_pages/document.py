"""Wrap rendered markup and CSS in a standalone HTML document."""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader
from markupsafe import Markup

from ._constants import DOCUMENT_TEMPLATE, TEMPLATES_DIR


def build_environment(templates_dir: Path | None = None) -> Environment:
    """Return the Jinja environment used for document and block templates."""
    return Environment(
        loader=FileSystemLoader(templates_dir or TEMPLATES_DIR),
        autoescape=True,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


class DocumentBuilder:
    """Render ``page.jinja`` around a body fragment and its stylesheet."""

    def __init__(self, env: Environment | None = None) -> None:
        self.env = env or build_environment()
        self.template = self.env.get_template(DOCUMENT_TEMPLATE)

    def render(self, *, title: str, body: str, css: str = "", lang: str = "en") -> str:
        """Return a complete HTML document.

        ``body`` and ``css`` are trusted output of the renderers and are
        embedded verbatim; ``title`` is escaped.
        """
        html = self.template.render(
            title=title,
            body=Markup(body),  # noqa: S704 - renderer output is already escaped
            css=Markup(css.strip()),  # noqa: S704 - custom CSS is sanitized upstream
            lang=lang,
        )
        if not html.endswith("\n"):
            html += "\n"
        return html


__all__ = ["DocumentBuilder", "build_environment"]
