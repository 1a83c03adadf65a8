"""Validate, render, and scope per-instance style data.

Element instances carry a flat ``style_data`` mapping edited through the page
builder GUI. This module turns that mapping into CSS in three ways:

* :func:`build_inline_style` emits inheriting properties (margin, typography,
  shadow, opacity, sizing) for the wrapper's ``style`` attribute.
* :func:`build_cascade_styles` emits non-inheriting properties (background,
  padding, border, radius) as a rule targeting ``scope, scope > *`` so the
  values reach children whose catalogue CSS would otherwise cover them.
* :func:`scope_custom_css` prefixes free-form custom CSS with an instance scope.

:func:`sanitize_style_data` produces the cleaned mapping persisted on save. Both
paths share the same validators, so data that survives sanitisation renders
identically and data that would be dropped on save is also ignored at render.

Example
-------
>>> build_cascade_styles({"bg_color": "#ff0000", "padding_top": "10"}, ".x")
'.x, .x > * { background-color: #ff0000; padding-top: 10px; }\\n'
"""

from __future__ import annotations

import collections.abc as cabc
import logging
import re
import typing as typ

from ._format import format_number, is_numeric

logger = logging.getLogger(__name__)

UNITS = ("px", "rem", "em", "%", "vh", "vw")
TEXT_ALIGNS = ("left", "center", "right", "justify")
TEXT_WEIGHTS = ("100", "200", "300", "400", "500", "600", "700", "800", "900")
BORDER_STYLES = ("none", "solid", "dashed", "dotted", "double")
BG_SIZES = ("cover", "contain", "auto")
BG_POSITIONS = (
    "center center",
    "top center",
    "bottom center",
    "left center",
    "right center",
)
BG_REPEATS = ("no-repeat", "repeat", "repeat-x", "repeat-y")
SIDES = ("top", "right", "bottom", "left")

NUMBER_MIN = -9999.0
NUMBER_MAX = 9999.0
CUSTOM_CSS_LIMIT = 10_000

NUMERIC_KEYS = (
    *(f"margin_{side}" for side in SIDES),
    *(f"padding_{side}" for side in SIDES),
    "text_size",
    "border_width",
    "border_radius",
    "shadow_x",
    "shadow_y",
    "shadow_blur",
    "shadow_spread",
)
UNIT_KEYS = (
    "margin_unit",
    "padding_unit",
    "text_size_unit",
    "border_unit",
    "border_radius_unit",
)
COLOR_KEYS = ("bg_color", "text_color", "border_color", "shadow_color")
SELECT_WHITELIST: dict[str, tuple[str, ...]] = {
    "text_align": TEXT_ALIGNS,
    "text_weight": TEXT_WEIGHTS,
    "border_style": BORDER_STYLES,
    "bg_size": BG_SIZES,
    "bg_position": BG_POSITIONS,
    "bg_repeat": BG_REPEATS,
}
DIMENSION_KEYS = ("max_width", "min_height")
LINKED_KEYS = ("margin_linked", "padding_linked")

PAGE_TARGETS: dict[str, str] = {
    "page_body": ".page-body",
    "container": ".container",
    "site_main": ".site-main",
}

HEX_COLOR_PATTERN = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
RGB_COLOR_PATTERN = re.compile(
    r"^rgba?\(\s*\d{1,3}\s*,\s*\d{1,3}\s*,\s*\d{1,3}\s*(?:,\s*[\d.]+\s*)?\)$"
)
DIMENSION_PATTERN = re.compile(r"^-?\d+(?:\.\d+)?(?:px|rem|em|%|vh|vw)$")
CLASS_STRIP_PATTERN = re.compile(r"[^a-zA-Z0-9\-_ ]")
AT_RULE_PATTERN = re.compile(r"^@(?:media|keyframes|supports)\b", re.IGNORECASE)

DANGEROUS_CSS_PATTERNS = (
    re.compile(r"@import\b", re.IGNORECASE),
    re.compile(r"@charset\b", re.IGNORECASE),
    re.compile(r"javascript\s*:", re.IGNORECASE),
    re.compile(r"expression\s*\(", re.IGNORECASE),
    re.compile(r"behavior\s*:", re.IGNORECASE),
    re.compile(r"-moz-binding\s*:", re.IGNORECASE),
    re.compile(r"</style", re.IGNORECASE),
    re.compile(r"<script", re.IGNORECASE),
    re.compile(r"<!--"),
)
DANGEROUS_VALUE_PATTERNS = (
    re.compile(r"expression\s*\(", re.IGNORECASE),
    re.compile(r"javascript\s*:", re.IGNORECASE),
    re.compile(r"@import", re.IGNORECASE),
    re.compile(r"url\s*\(\s*[\"']?\s*javascript", re.IGNORECASE),
    re.compile(r"[<>]"),
    re.compile(r"/\*"),
)

StyleData: typ.TypeAlias = cabc.Mapping[str, typ.Any]


def valid_color(value: object) -> bool:
    """Return ``True`` for ``#RGB``/``#RRGGBB``/``#RRGGBBAA`` or numeric ``rgb()``/``rgba()``."""
    if not isinstance(value, str) or not value:
        return False
    return bool(HEX_COLOR_PATTERN.match(value) or RGB_COLOR_PATTERN.match(value))


def valid_unit(value: object) -> str:
    """Return ``value`` when it is a whitelisted unit, otherwise ``px``."""
    return value if isinstance(value, str) and value in UNITS else "px"


def valid_dimension(value: object) -> bool:
    """Validate a CSS length such as ``100px``, ``50%``, ``auto`` or ``none``."""
    if not isinstance(value, str):
        return False
    text = value.strip()
    return text in {"", "auto", "none"} or bool(DIMENSION_PATTERN.match(text))


def sanitize_css_value(value: str) -> str:
    """Return the trimmed value, or ``""`` when it contains an injection pattern."""
    text = value.strip()
    if any(pattern.search(text) for pattern in DANGEROUS_VALUE_PATTERNS):
        return ""
    return text


def valid_image_url(value: object) -> bool:
    """Accept plain URLs and ``data:image/`` URIs that carry no script or markup."""
    if not isinstance(value, str):
        return False
    url = sanitize_css_value(value)
    if not url:
        return False
    lowered = url.lower()
    if lowered.startswith("data:") and not lowered.startswith("data:image/"):
        return False
    return not re.search(r"expression|javascript", lowered)


def sanitize_css_class(value: str) -> str:
    """Strip a class list down to letters, digits, hyphens, underscores and spaces."""
    return CLASS_STRIP_PATTERN.sub("", value).strip()


def sanitize_custom_css(css: str) -> str:
    """Cap ``css`` at the length limit and remove every dangerous pattern.

    Removal repeats until the text is stable so that fragments such as
    ``@imp@importort`` cannot reassemble a blocked token.
    """
    cleaned = css[:CUSTOM_CSS_LIMIT]
    while True:
        previous = cleaned
        for pattern in DANGEROUS_CSS_PATTERNS:
            cleaned = pattern.sub("", cleaned)
        if cleaned == previous:
            break
    return cleaned.strip()


def _clamped(value: object, low: float = NUMBER_MIN, high: float = NUMBER_MAX) -> str | None:
    """Return the clamped numeric value as CSS text, or ``None`` if not numeric."""
    if value is None or value == "" or not is_numeric(value):
        return None
    number = float(typ.cast("str | float", value))
    return format_number(max(low, min(high, number)))


def sanitize_style_data(data: StyleData) -> dict[str, typ.Any]:
    """Return a cleaned copy of ``data`` containing only whitelisted values.

    Parameters
    ----------
    data : Mapping[str, Any]
        Raw style data as submitted by the editor.

    Returns
    -------
    dict[str, Any]
        Validated style data. Unknown keys and invalid values are dropped;
        numbers are clamped to ``[-9999, 9999]`` (opacity to ``[0, 1]``).
    """
    if not isinstance(data, cabc.Mapping):
        return {}
    sanitized: dict[str, typ.Any] = {}

    for key in NUMERIC_KEYS:
        number = _clamped(data.get(key))
        if number is not None:
            sanitized[key] = number

    opacity = _clamped(data.get("opacity"), 0.0, 1.0)
    if opacity is not None:
        sanitized["opacity"] = opacity

    for key in UNIT_KEYS:
        if data.get(key) in UNITS:
            sanitized[key] = data[key]

    for key in COLOR_KEYS:
        if valid_color(data.get(key)):
            sanitized[key] = data[key]

    for key, allowed in SELECT_WHITELIST.items():
        if data.get(key) in allowed:
            sanitized[key] = data[key]

    image = data.get("bg_image")
    if isinstance(image, str) and valid_image_url(image):
        sanitized["bg_image"] = sanitize_css_value(image)

    for key in DIMENSION_KEYS:
        value = data.get(key)
        if isinstance(value, str):
            cleaned = sanitize_css_value(value)
            if cleaned and valid_dimension(cleaned):
                sanitized[key] = cleaned

    custom_class = data.get("custom_class")
    if isinstance(custom_class, str):
        sanitized["custom_class"] = sanitize_css_class(custom_class)

    custom_css = data.get("custom_css")
    if isinstance(custom_css, str):
        sanitized["custom_css"] = sanitize_custom_css(custom_css)

    for key in LINKED_KEYS:
        if key in data:
            sanitized[key] = bool(data[key])

    dropped = sorted(set(data) - set(sanitized))
    if dropped:
        logger.debug("dropped style keys: %s", ", ".join(dropped))
    return sanitized


def build_inline_style(style: StyleData) -> str:
    """Build the inline ``style`` attribute value for an instance wrapper.

    Only inheriting or wrapper-only properties are emitted here; background,
    padding, border and radius go through :func:`build_cascade_styles`.
    """
    parts: list[str] = []

    margin_unit = valid_unit(style.get("margin_unit", "px"))
    for side in SIDES:
        value = _clamped(style.get(f"margin_{side}"))
        if value is not None:
            parts.append(f"margin-{side}: {value}{margin_unit}")

    text_color = style.get("text_color")
    if valid_color(text_color):
        parts.append(f"color: {text_color}")

    text_size = _clamped(style.get("text_size"))
    if text_size is not None:
        parts.append(f"font-size: {text_size}{valid_unit(style.get('text_size_unit', 'px'))}")

    if style.get("text_align") in TEXT_ALIGNS:
        parts.append(f"text-align: {style['text_align']}")
    if style.get("text_weight") in TEXT_WEIGHTS:
        parts.append(f"font-weight: {style['text_weight']}")

    shadow = [_clamped(style.get(f"shadow_{key}")) for key in ("x", "y", "blur", "spread")]
    shadow_color = style.get("shadow_color")
    if (
        all(value is not None for value in shadow)
        and valid_color(shadow_color)
        and any(value != "0" for value in shadow)
    ):
        x, y, blur, spread = shadow
        parts.append(f"box-shadow: {x}px {y}px {blur}px {spread}px {shadow_color}")

    opacity = style.get("opacity")
    if is_numeric(opacity) and float(typ.cast("str | float", opacity)) < 1.0:
        parts.append(f"opacity: {_clamped(opacity, 0.0, 1.0)}")

    for key, prop in (("max_width", "max-width"), ("min_height", "min-height")):
        value = style.get(key)
        if isinstance(value, str) and value.strip() and valid_dimension(value):
            parts.append(f"{prop}: {value.strip()}")

    return "; ".join(parts)


def build_non_inheriting_declarations(style: StyleData) -> str:
    """Return ``"; "``-joined background, padding, border and radius declarations."""
    props: list[str] = []

    if valid_color(style.get("bg_color")):
        props.append(f"background-color: {style['bg_color']}")

    image = style.get("bg_image")
    if isinstance(image, str) and valid_image_url(image):
        quoted = sanitize_css_value(image).replace("'", "\\'")
        props.append(f"background-image: url('{quoted}')")
    if style.get("bg_size") in BG_SIZES:
        props.append(f"background-size: {style['bg_size']}")
    if style.get("bg_position") in BG_POSITIONS:
        props.append(f"background-position: {style['bg_position']}")
    if style.get("bg_repeat") in BG_REPEATS:
        props.append(f"background-repeat: {style['bg_repeat']}")

    padding_unit = valid_unit(style.get("padding_unit", "px"))
    for side in SIDES:
        value = _clamped(style.get(f"padding_{side}"))
        if value is not None:
            props.append(f"padding-{side}: {value}{padding_unit}")

    border_width = _clamped(style.get("border_width"))
    border_style = style.get("border_style")
    border_color = style.get("border_color")
    if (
        border_width is not None
        and float(border_width) > 0
        and border_style in BORDER_STYLES
        and border_style != "none"
        and valid_color(border_color)
    ):
        unit = valid_unit(style.get("border_unit", "px"))
        props.append(f"border: {border_width}{unit} {border_style} {border_color}")

    radius = _clamped(style.get("border_radius"))
    if radius is not None and float(radius) > 0:
        unit = valid_unit(style.get("border_radius_unit", "px"))
        props.append(f"border-radius: {radius}{unit}")

    return "; ".join(props)


def build_cascade_styles(style: StyleData, scope: str) -> str:
    """Build a ``scope, scope > *`` rule for the non-inheriting properties.

    Parameters
    ----------
    style : Mapping[str, Any]
        Instance style data.
    scope : str
        Selector identifying the instance wrapper.

    Returns
    -------
    str
        A single CSS rule terminated by a newline, or ``""`` when no
        non-inheriting property is set.
    """
    declarations = build_non_inheriting_declarations(style)
    if not declarations:
        return ""
    return f"{scope}, {scope} > * {{ {declarations}; }}\n"


def get_custom_classes(style: StyleData) -> str:
    """Return the sanitised ``custom_class`` value, or ``""``."""
    value = style.get("custom_class", "")
    if not isinstance(value, str):
        return ""
    return sanitize_css_class(value)


def build_page_layout_css(page_style: StyleData) -> str:
    """Build one rule per page layout target (``.page-body``, ``.container``, ...)."""
    rules: list[str] = []
    for key, selector in PAGE_TARGETS.items():
        data = page_style.get(key)
        if not isinstance(data, cabc.Mapping) or not data:
            continue
        declarations = "; ".join(
            part
            for part in (build_inline_style(data), build_non_inheriting_declarations(data))
            if part
        )
        if declarations:
            rules.append(f"{selector} {{ {declarations}; }}\n")
    return "".join(rules)


def _is_scoped(selector: str, scope: str) -> bool:
    return selector == scope or selector.startswith(f"{scope} ")


def _scope_rule(block: str, scope: str) -> str:
    brace = block.find("{")
    if brace == -1:
        return block
    selectors = [part.strip() for part in block[:brace].split(",")]
    scoped = [
        selector if _is_scoped(selector, scope) else f"{scope} {selector}"
        for selector in selectors
        if selector
    ]
    return f"{', '.join(scoped)} {block[brace:]}"


def _scope_at_rule(block: str, scope: str) -> str:
    first = block.find("{")
    last = block.rfind("}")
    if first == -1 or last <= first:
        return block
    head = block[: first + 1]
    inner = scope_custom_css(block[first + 1 : last], scope)
    return f"{head}\n{inner}\n}}"


def scope_custom_css(css: str, scope: str) -> str:
    """Prefix every top-level selector in ``css`` with ``scope``.

    The text is scanned character by character while tracking brace depth;
    each time the depth returns to zero a complete block has been captured.
    ``@media``, ``@keyframes`` and ``@supports`` blocks are scoped
    recursively inside their original head. A selector equal to ``scope`` or
    starting with ``scope`` and a space is left alone, which makes the
    operation idempotent. Lookalikes such as ``.container-fluid`` under a
    ``.container`` scope are still prefixed. Trailing declarations without
    a selector are wrapped in ``scope { ... }``.

    Examples
    --------
    >>> scope_custom_css("h2, p { color: red; }", ".s")
    '.s h2, .s p { color: red; }'
    >>> scope_custom_css("color: red", ".s")
    '.s { color: red }'
    """
    css = css.strip()
    if not css:
        return ""

    blocks: list[str] = []
    buffer: list[str] = []
    depth = 0
    for char in css:
        if char == "}" and depth == 0:
            continue
        buffer.append(char)
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                block = "".join(buffer).strip()
                buffer.clear()
                if AT_RULE_PATTERN.match(block):
                    blocks.append(_scope_at_rule(block, scope))
                else:
                    blocks.append(_scope_rule(block, scope))

    remaining = "".join(buffer).strip()
    if remaining and "{" not in remaining:
        blocks.append(f"{scope} {{ {remaining} }}")
    return "\n".join(blocks)


__all__ = [
    "BG_POSITIONS",
    "BG_REPEATS",
    "BG_SIZES",
    "BORDER_STYLES",
    "CUSTOM_CSS_LIMIT",
    "PAGE_TARGETS",
    "TEXT_ALIGNS",
    "TEXT_WEIGHTS",
    "UNITS",
    "build_cascade_styles",
    "build_inline_style",
    "build_non_inheriting_declarations",
    "build_page_layout_css",
    "get_custom_classes",
    "sanitize_css_class",
    "sanitize_css_value",
    "sanitize_custom_css",
    "sanitize_style_data",
    "scope_custom_css",
    "valid_color",
    "valid_dimension",
    "valid_image_url",
    "valid_unit",
]
