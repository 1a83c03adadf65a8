"""Load site configuration YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from .._format import optional_int
from .helpers import _optional_str, _string_mapping
from .models import DesignConfig, PageConfig, SiteConfig, SiteConfigError


def load_site_config(path: Path) -> SiteConfig:
    """Load the YAML configuration describing pages and designs to build.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration file (for example,
        ``config/pages.yaml``).

    Returns
    -------
    SiteConfig
        Parsed configuration with output paths resolved against the default
        output directory.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    TypeError
        If the top-level YAML structure is not a mapping.
    SiteConfigError
        If neither pages nor designs are defined, or an entry is missing a
        required field.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> config = load_site_config(Path("config/pages.yaml"))  # doctest: +SKIP
    >>> sorted(config.pages)  # doctest: +SKIP
    ['home']
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise TypeError(msg)
    raw: dict[str, typ.Any] = dict(loaded)
    defaults = raw.get("defaults", {}) or {}
    output_dir = Path(defaults.get("output_dir", "public"))
    store = _optional_str(defaults.get("store"))

    pages_raw = raw.get("pages") or {}
    designs_raw = raw.get("designs") or {}
    if not pages_raw and not designs_raw:
        msg = "No pages or designs defined in site configuration."
        raise SiteConfigError(msg)

    pages: dict[str, PageConfig] = {}
    for key, payload in pages_raw.items():
        match payload:
            case dict():
                pages[str(key)] = _build_page_config(str(key), payload, output_dir)
            case _:
                msg = f"Page '{key}' must be a mapping."
                raise SiteConfigError(msg)

    designs: dict[str, DesignConfig] = {}
    for key, payload in designs_raw.items():
        match payload:
            case dict():
                designs[str(key)] = _build_design_config(str(key), payload, output_dir)
            case _:
                msg = f"Design '{key}' must be a mapping."
                raise SiteConfigError(msg)

    return SiteConfig(
        pages=pages,
        designs=designs,
        output_dir=output_dir,
        store=Path(store) if store else None,
    )


def _title_from_key(key: str) -> str:
    return key.replace("-", " ").replace("_", " ").title()


def _build_page_config(
    key: str, payload: typ.Mapping[str, typ.Any], output_dir: Path
) -> PageConfig:
    """Build a PageConfig for a single page entry."""
    content_id = optional_int(payload.get("content_id"))
    if content_id is None:
        msg = f"Page '{key}' is missing a numeric 'content_id'."
        raise SiteConfigError(msg)
    output = Path(payload.get("output") or f"{key}.html")
    return PageConfig(
        key=key,
        content_id=content_id,
        title=_optional_str(payload.get("title")) or _title_from_key(key),
        output=output_dir / output,
        blocks=bool(payload.get("blocks", False)),
        layout_template_id=optional_int(payload.get("layout_template_id")),
    )


def _build_design_config(
    key: str, payload: typ.Mapping[str, typ.Any], output_dir: Path
) -> DesignConfig:
    """Build a DesignConfig for a single design entry."""
    source = _optional_str(payload.get("source"))
    if source is None:
        msg = f"Design '{key}' is missing 'source'."
        raise SiteConfigError(msg)
    output = Path(payload.get("output") or f"{key}.html")
    return DesignConfig(
        key=key,
        source=Path(source),
        output=output_dir / output,
        title=_optional_str(payload.get("title")) or _title_from_key(key),
        variables=_string_mapping(payload.get("variables")),
    )


__all__ = ["load_site_config"]
