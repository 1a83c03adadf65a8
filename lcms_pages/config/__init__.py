"""Load and validate the site build configuration YAML.

This subpackage parses ``config/pages.yaml``, applies the shared defaults
(output directory and content-store fixture), and produces typed dataclasses
(:class:`SiteConfig`, :class:`PageConfig`, :class:`DesignConfig`) consumed by
the site builder and the CLI.

Examples
--------
>>> from pathlib import Path
>>> from lcms_pages.config import load_site_config
>>> site = load_site_config(Path("config/pages.yaml"))  # doctest: +SKIP
>>> site.get_page("home").content_id  # doctest: +SKIP
1
"""

from .loader import load_site_config
from .models import DesignConfig, PageConfig, SiteConfig, SiteConfigError

__all__ = [
    "DesignConfig",
    "PageConfig",
    "SiteConfig",
    "SiteConfigError",
    "load_site_config",
]
