"""Compile pen design documents into HTML and CSS.

A pen document is the JSON scene graph saved by the design tool::

    {"children": [...], "variables": {...}, "themes": {...}}

:class:`PenConverter` owns all per-document state: the component registry,
the collected node rules, the icon-font imports, the ref depth counter and
the current parent layout. Instances are single-use; the module-level entry
points create a fresh converter for every call.

Example
-------
>>> result = convert_document({"children": [{"type": "rectangle", "id": "box"}]})
>>> result.html
'<div class="pen-box"></div>'
"""

from __future__ import annotations

import collections.abc as cabc
import contextlib
import logging
import re
import typing as typ
from pathlib import Path

import msgspec

from .._format import format_number
from . import nodes
from .models import ConversionResult, PenDocumentError, VariableSummary

logger = logging.getLogger(__name__)

MAX_REF_DEPTH = 10
BASE_RULE = '/* base */\n[class^="pen-"] { box-sizing: border-box; }\n\n'
OVERRIDE_NAME_PATTERN = re.compile(r"[^a-zA-Z0-9_-]")
OVERRIDE_VALUE_PATTERN = re.compile(r"[;{}<>]")

Document: typ.TypeAlias = cabc.Mapping[str, typ.Any]


class PenConverter:
    """Render one pen document into HTML markup and a stylesheet."""

    def __init__(
        self,
        document: Document,
        variable_overrides: cabc.Mapping[str, object] | None = None,
    ) -> None:
        if not isinstance(document, cabc.Mapping) or "children" not in document:
            msg = "Invalid pen document: missing children"
            raise PenDocumentError(msg)
        if not isinstance(document["children"], list):
            msg = "Invalid pen document: children must be a list"
            raise PenDocumentError(msg)
        self.document = document
        self.variable_overrides = dict(variable_overrides or {})
        variables = document.get("variables")
        self.variables: dict[str, typ.Any] = (
            dict(variables) if isinstance(variables, cabc.Mapping) else {}
        )
        self.components: dict[str, dict[str, typ.Any]] = {}
        self._scan_components(document["children"])
        self.parent_layout = "none"
        self._rules: list[str] = []
        self._icon_imports: dict[str, str] = {}
        self._ref_depth = 0

    def _scan_components(self, children: list[typ.Any]) -> None:
        for child in children:
            if not isinstance(child, dict):
                continue
            if child.get("reusable") and child.get("id"):
                self.components[str(child["id"])] = child
            if isinstance(child.get("children"), list):
                self._scan_components(child["children"])

    def get_component(self, component_id: str) -> dict[str, typ.Any] | None:
        """Return the registered reusable node with ``component_id``."""
        return self.components.get(component_id)

    @contextlib.contextmanager
    def child_layout(self, layout: str) -> cabc.Iterator[None]:
        """Set the parent layout seen by children, restoring it afterwards."""
        previous, self.parent_layout = self.parent_layout, layout
        try:
            yield
        finally:
            self.parent_layout = previous

    @contextlib.contextmanager
    def ref_scope(self) -> cabc.Iterator[bool]:
        """Enter one level of ref expansion; yields ``False`` past the depth cap."""
        self._ref_depth += 1
        try:
            yield self._ref_depth <= MAX_REF_DEPTH
        finally:
            self._ref_depth -= 1

    def add_icon_font_import(self, family: str, url: str) -> None:
        """Register a stylesheet import for an icon family (once per family)."""
        self._icon_imports.setdefault(family, url)

    def render_node(self, node: cabc.Mapping[str, typ.Any]) -> ConversionResult:
        """Render ``node`` and record its CSS rule ahead of its descendants."""
        slot = len(self._rules)
        self._rules.append("")
        result = nodes.render_node(node, self)
        self._rules[slot] = result.css
        return result

    def render_children(self, children: list[typ.Any]) -> str:
        """Render every mapping in ``children`` and return the joined HTML."""
        return "".join(
            self.render_node(child).html for child in children if isinstance(child, dict)
        )

    def convert(self) -> ConversionResult:
        """Render all non-reusable top-level nodes and assemble the stylesheet."""
        self._rules = []
        self._icon_imports = {}
        self._ref_depth = 0
        self.parent_layout = "none"

        html = "".join(
            self.render_node(child).html
            for child in self.document["children"]
            if isinstance(child, dict) and not child.get("reusable")
        )

        parts = [f"@import url('{url}');\n" for url in self._icon_imports.values()]
        variable_css = build_variable_css(self.variables, self.variable_overrides)
        if variable_css:
            parts.append(variable_css + "\n")
        parts.append(BASE_RULE)
        parts.append("\n".join(rule for rule in self._rules if rule))
        logger.debug(
            "converted pen document: %d rules, %d components",
            sum(1 for rule in self._rules if rule),
            len(self.components),
        )
        return ConversionResult(html, "".join(parts))


def format_variable_value(var_type: object, value: object) -> str:
    """Format a variable value for a custom property declaration."""
    if var_type == "boolean":
        return "1" if value else "0"
    match value:
        case None:
            return ""
        case bool():
            return "1" if value else ""
        case int() | float():
            return format_number(value)
        case _:
            return str(value)


def theme_selector(theme: cabc.Mapping[str, object]) -> str:
    """Return ``[data-theme-AXIS="VALUE"]`` selectors for a theme combination.

    Examples
    --------
    >>> theme_selector({"mode": "dark", "density": "compact"})
    '[data-theme-mode="dark"][data-theme-density="compact"]'
    """
    return "".join(f'[data-theme-{axis}="{value}"]' for axis, value in theme.items())


def _is_themed(value: object) -> typ.TypeGuard[list[typ.Any]]:
    return isinstance(value, list) and bool(value) and isinstance(value[0], cabc.Mapping)


def _block(selector: str, properties: cabc.Mapping[str, str]) -> str:
    body = "".join(f"  {name}: {value};\n" for name, value in properties.items())
    return f"{selector} {{\n{body}}}\n"


def build_variable_css(
    variables: cabc.Mapping[str, typ.Any],
    overrides: cabc.Mapping[str, object] | None = None,
) -> str:
    """Return ``:root`` and theme-selector blocks declaring document variables.

    Runtime ``overrides`` are appended as a final ``:root`` block so they win
    over document defaults; their names and values are stripped of anything
    that could escape the declaration.
    """
    root: dict[str, str] = {}
    themed: dict[str, dict[str, str]] = {}
    for name, definition in variables.items():
        if not isinstance(definition, cabc.Mapping) or definition.get("value") is None:
            continue
        var_type = definition.get("type", "string")
        value = definition["value"]
        if not _is_themed(value):
            root[f"--{name}"] = format_variable_value(var_type, value)
            continue
        for entry in value:
            if not isinstance(entry, cabc.Mapping):
                continue
            css_value = format_variable_value(var_type, entry.get("value", ""))
            theme = entry.get("theme")
            if isinstance(theme, cabc.Mapping) and theme:
                themed.setdefault(theme_selector(theme), {})[f"--{name}"] = css_value
            else:
                root[f"--{name}"] = css_value

    css: list[str] = []
    if root:
        css.append(_block(":root", root))
    css.extend(_block(selector, properties) for selector, properties in themed.items())
    if overrides:
        safe = {
            f"--{OVERRIDE_NAME_PATTERN.sub('', str(name))}": OVERRIDE_VALUE_PATTERN.sub(
                "", format_variable_value("string", value)
            )
            for name, value in overrides.items()
        }
        css.append("/* Settings overrides */\n" + _block(":root", safe))
    return "".join(css)


def _theme_key(theme: object) -> str:
    if not isinstance(theme, cabc.Mapping) or not theme:
        return "default"
    return "/".join(f"{axis}:{value}" for axis, value in theme.items())


def extract_variables(document: Document) -> dict[str, VariableSummary]:
    """Summarise a document's variables for a settings form.

    Parameters
    ----------
    document : Mapping[str, Any]
        Parsed pen document. Anything without a ``variables`` mapping yields
        an empty result.

    Returns
    -------
    dict[str, VariableSummary]
        One summary per variable name, in document order.
    """
    variables = document.get("variables") if isinstance(document, cabc.Mapping) else None
    if not isinstance(variables, cabc.Mapping):
        return {}
    summaries: dict[str, VariableSummary] = {}
    for name, definition in variables.items():
        if not isinstance(definition, cabc.Mapping):
            continue
        summary = VariableSummary(type=str(definition.get("type", "string")))
        value = definition.get("value")
        if _is_themed(value):
            summary.themed = True
            for entry in value:
                if isinstance(entry, cabc.Mapping):
                    summary.values[_theme_key(entry.get("theme"))] = entry.get("value", "")
        else:
            summary.values["default"] = value
        summaries[str(name)] = summary
    return summaries


def convert_document(
    document: Document,
    variable_overrides: cabc.Mapping[str, object] | None = None,
) -> ConversionResult:
    """Convert a parsed pen document into HTML and CSS."""
    return PenConverter(document, variable_overrides).convert()


def decode_document(text: str | bytes) -> dict[str, typ.Any]:
    """Decode pen JSON, raising :class:`PenDocumentError` on malformed input."""
    try:
        document = msgspec.json.decode(text)
    except msgspec.DecodeError as exc:
        msg = f"Invalid pen document JSON: {exc}"
        raise PenDocumentError(msg) from exc
    if not isinstance(document, dict):
        msg = "Invalid pen document: top level must be an object"
        raise PenDocumentError(msg)
    return document


def load_document(path: Path) -> dict[str, typ.Any]:
    """Read and decode the pen document stored at ``path``."""
    if not path.is_file():
        msg = f"pen file not found: {path}"
        raise FileNotFoundError(msg)
    return decode_document(path.read_bytes())


def convert_json(text: str | bytes) -> ConversionResult:
    """Convert pen JSON text into HTML and CSS."""
    return convert_document(decode_document(text))


def convert_file(
    path: Path,
    variable_overrides: cabc.Mapping[str, object] | None = None,
) -> ConversionResult:
    """Convert the pen file at ``path`` into HTML and CSS."""
    return convert_document(load_document(path), variable_overrides)


__all__ = [
    "MAX_REF_DEPTH",
    "PenConverter",
    "build_variable_css",
    "convert_document",
    "convert_file",
    "convert_json",
    "decode_document",
    "extract_variables",
    "format_variable_value",
    "load_document",
    "theme_selector",
]
