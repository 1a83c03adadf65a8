"""Build every configured page and design into static HTML files.

:class:`SiteBuilder` ties the configuration model to the renderers: element
pages are rendered from the content-store fixture through
:class:`~lcms_pages.page.PageRenderer`, and pen designs are compiled with
:func:`~lcms_pages.pen.convert_file`. Both are wrapped in ``page.jinja`` and
written as UTF-8 files, creating parent directories as needed.

>>> from pathlib import Path
>>> from lcms_pages.config import load_site_config
>>> builder = SiteBuilder(load_site_config(Path("config/pages.yaml")))  # doctest: +SKIP
>>> builder.run()  # doctest: +SKIP
[PosixPath('public/index.html')]
"""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

from ._constants import DEFAULT_STORE
from .document import DocumentBuilder
from .page import FileContentStore, PageRenderer
from .pen import convert_file

if typ.TYPE_CHECKING:
    from .config import DesignConfig, PageConfig, SiteConfig
    from .page import ContentStore

logger = logging.getLogger(__name__)


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class SiteBuilder:
    """Render configured pages and designs to disk."""

    def __init__(
        self,
        site: SiteConfig,
        *,
        store: ContentStore | None = None,
        documents: DocumentBuilder | None = None,
    ) -> None:
        self.site = site
        self._store = store
        self.documents = documents or DocumentBuilder()

    @property
    def store(self) -> ContentStore:
        """Return the content store, loading the configured fixture on first use."""
        if self._store is None:
            self._store = FileContentStore.from_path(self.site.store or DEFAULT_STORE)
        return self._store

    def build_page(self, page: PageConfig) -> Path:
        """Render one element page and return the written path."""
        renderer = PageRenderer(self.store)
        html = renderer.render_document(
            page.content_id,
            page.title,
            blocks=page.blocks,
            layout_template_id=page.layout_template_id,
        )
        logger.info("rendered page %s", page.key)
        return _write(page.output, html)

    def build_design(self, design: DesignConfig) -> Path:
        """Compile one pen design and return the written path."""
        result = convert_file(design.source, design.variables)
        html = self.documents.render(title=design.title, body=result.html, css=result.css)
        logger.info("compiled design %s", design.key)
        return _write(design.output, html)

    def run(self) -> list[Path]:
        """Build every page, then every design, returning the written paths."""
        written = [self.build_page(page) for page in self.site.pages.values()]
        written.extend(self.build_design(design) for design in self.site.designs.values())
        return written


__all__ = ["SiteBuilder"]
