"""Cyclopts CLI entrypoint for rendering element pages and pen designs.

The ``pages`` console script defined here renders every page and design listed
in ``config/pages.yaml`` (``pages build``), renders a single content id from a
content-store fixture (``pages render``), compiles one pen document
(``pages convert``), and lists the variables a pen document declares
(``pages variables``). Options can also be supplied through ``INPUT_*``
environment variables, which keeps CI invocations short.

Examples
--------
Build everything in the default configuration:

>>> from lcms_pages.cli import main
>>> main()  # doctest: +SKIP

Compile one design with a colour override:

>>> from lcms_pages.cli import app
>>> app(
...     ["convert", "designs/landing.pen", "--set", "primary=#2563eb"]
... )  # doctest: +SKIP
"""

from __future__ import annotations

import os
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from ._constants import DEFAULT_CONFIG, DEFAULT_STORE
from ._logging import configure_logging
from .config import load_site_config
from .document import DocumentBuilder
from .page import FileContentStore, PageRenderer
from .pen import convert_file, extract_variables, load_document
from .site import SiteBuilder

app = App(name="pages", config=cyclopts.config.Env("INPUT_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _emit(text: str, output: Path | None) -> None:
    """Write ``text`` to ``output`` (reporting the path) or to stdout."""
    if output is None:
        print(text, end="" if text.endswith("\n") else "\n")
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    print(f"wrote {_format_path(output)}")


def parse_overrides(pairs: typ.Iterable[str]) -> dict[str, str]:
    """Parse ``NAME=VALUE`` pairs into a variable override mapping.

    Raises
    ------
    ValueError
        If a pair has no ``=`` or an empty name.
    """
    overrides: dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name.strip():
            msg = f"Invalid variable override '{pair}'; expected NAME=VALUE."
            raise ValueError(msg)
        overrides[name.strip()] = value.strip()
    return overrides


@app.command(help="Render every configured page and design to HTML files.")
def build(
    *,
    config: typ.Annotated[
        Path, Parameter(help="Path to site config", env_var="INPUT_CONFIG")
    ] = DEFAULT_CONFIG,
    page: typ.Annotated[
        str | None, Parameter(help="Only build this page", env_var="INPUT_PAGE")
    ] = None,
    design: typ.Annotated[
        str | None, Parameter(help="Only build this design", env_var="INPUT_DESIGN")
    ] = None,
) -> None:
    """Build the pages and designs named in the site configuration.

    Parameters
    ----------
    config : Path, optional
        Path to the ``pages.yaml`` configuration file (overridable via
        ``INPUT_CONFIG``).
    page : str or None, optional
        Build only this page key.
    design : str or None, optional
        Build only this design key.

    Returns
    -------
    None
        Writes HTML files and prints each written path.
    """
    site = load_site_config(config)
    builder = SiteBuilder(site)
    if page or design:
        written = []
        if page:
            written.append(builder.build_page(site.get_page(page)))
        if design:
            written.append(builder.build_design(site.get_design(design)))
    else:
        written = builder.run()
    for path in written:
        print(f"wrote {_format_path(path)}")


@app.command(help="Render one content id from a content-store fixture.")
def render(
    content_id: int,
    *,
    store: typ.Annotated[
        Path, Parameter(help="Content-store JSON fixture", env_var="INPUT_STORE")
    ] = DEFAULT_STORE,
    title: typ.Annotated[str, Parameter(help="Document title")] = "Page",
    blocks: typ.Annotated[bool, Parameter(help="Group instances into blocks")] = False,
    layout_template_id: typ.Annotated[
        int | None, Parameter(help="Layout template providing the blocks")
    ] = None,
    output: typ.Annotated[
        Path | None, Parameter(help="Write to this file instead of stdout")
    ] = None,
) -> None:
    """Render a page's HTML document to stdout or ``output``."""
    renderer = PageRenderer(FileContentStore.from_path(store))
    html = renderer.render_document(
        content_id, title, blocks=blocks, layout_template_id=layout_template_id
    )
    _emit(html, output)


@app.command(help="Compile a pen design document to HTML and CSS.")
def convert(
    source: Path,
    *,
    output: typ.Annotated[
        Path | None, Parameter(help="Write the HTML document to this file")
    ] = None,
    css_output: typ.Annotated[
        Path | None, Parameter(help="Also write the stylesheet to this file")
    ] = None,
    title: typ.Annotated[str | None, Parameter(help="Document title")] = None,
    set_: typ.Annotated[
        tuple[str, ...],
        Parameter(name="--set", help="Variable override as NAME=VALUE (repeatable)"),
    ] = (),
) -> None:
    """Compile ``source`` and emit a standalone HTML document."""
    result = convert_file(source, parse_overrides(set_))
    html = DocumentBuilder().render(
        title=title or source.stem, body=result.html, css=result.css
    )
    if css_output is not None:
        _emit(result.css, css_output)
    _emit(html, output)


@app.command(help="List the variables declared by a pen design document.")
def variables(source: Path) -> None:
    """Print each variable with its type and per-theme values."""
    for name, summary in extract_variables(load_document(source)).items():
        label = f"{summary.type}, themed" if summary.themed else summary.type
        values = ", ".join(f"{key}={value}" for key, value in summary.values.items())
        print(f"{name} ({label}): {values}")


def main() -> None:
    """Invoke the Cyclopts application that powers the `pages` console command.

    The ``INPUT_LOG_LEVEL`` environment variable sets the log level
    (default ``WARNING``).

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    configure_logging(os.getenv("INPUT_LOG_LEVEL", "WARNING"))
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
