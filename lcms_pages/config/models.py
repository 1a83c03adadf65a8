"""Typed dataclasses describing the site build configuration."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path


class SiteConfigError(ValueError):
    """Raised when the site configuration is invalid or incomplete."""


@dc.dataclass(slots=True)
class PageConfig:
    """A content page rendered from element instances in the content store."""

    key: str
    content_id: int
    title: str
    output: Path
    blocks: bool = False
    layout_template_id: int | None = None


@dc.dataclass(slots=True)
class DesignConfig:
    """A pen design document compiled to a standalone HTML page."""

    key: str
    source: Path
    output: Path
    title: str
    variables: dict[str, str] = dc.field(default_factory=dict)


@dc.dataclass(slots=True)
class SiteConfig:
    """Collection of page and design configs alongside shared defaults."""

    pages: dict[str, PageConfig] = dc.field(default_factory=dict)
    designs: dict[str, DesignConfig] = dc.field(default_factory=dict)
    output_dir: Path = Path("public")
    store: Path | None = None

    def get_page(self, page_id: str) -> PageConfig:
        """Return the page configured under ``page_id``."""
        try:
            return self.pages[page_id]
        except KeyError as exc:
            available = ", ".join(sorted(self.pages))
            msg = f"Unknown page '{page_id}'. Known pages: {available}"
            raise KeyError(msg) from exc

    def get_design(self, design_id: str) -> DesignConfig:
        """Return the design configured under ``design_id``."""
        try:
            return self.designs[design_id]
        except KeyError as exc:
            available = ", ".join(sorted(self.designs))
            msg = f"Unknown design '{design_id}'. Known designs: {available}"
            raise KeyError(msg) from exc


__all__ = [
    "DesignConfig",
    "PageConfig",
    "SiteConfig",
    "SiteConfigError",
]
