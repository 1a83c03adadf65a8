"""Map pen node attributes to CSS declarations.

Every builder is a pure function returning a list of ``"property: value"``
strings; callers join them into rules. Variable references (``$name`` or
``$--name``) resolve to ``var(--name)`` and are never suffixed with a unit.
"""

from __future__ import annotations

import collections.abc as cabc
import math
import re
import typing as typ

from .._format import as_float, format_number, is_numeric, round_half_up

Node: typ.TypeAlias = cabc.Mapping[str, typ.Any]
Declarations: typ.TypeAlias = list[str]

JUSTIFY_CONTENT = {
    "start": "flex-start",
    "center": "center",
    "end": "flex-end",
    "space_between": "space-between",
    "space_around": "space-around",
}
ALIGN_ITEMS = {"start": "flex-start", "center": "center", "end": "flex-end"}
IMAGE_MODES = {"fill": "cover", "fit": "contain", "stretch": "100% 100%"}
DEFAULT_SHADOW_COLOR = "#00000040"
FALLBACK_PATTERN = re.compile(r"\((\d+(?:\.\d+)?)\)")
SIDES = ("top", "right", "bottom", "left")


def resolve_value(value: object) -> str:
    """Return the CSS text for ``value``, mapping ``$name`` to ``var(--name)``.

    Examples
    --------
    >>> resolve_value("$primary")
    'var(--primary)'
    >>> resolve_value("$--primary")
    'var(--primary)'
    >>> resolve_value(12.0)
    '12'
    """
    match value:
        case None:
            return ""
        case str() if value.startswith("$"):
            name = value[1:]
            return f"var({name})" if name.startswith("--") else f"var(--{name})"
        case bool() | int() | float():
            return format_number(value)
        case _:
            return str(value)


def is_variable(value: object) -> bool:
    """Return ``True`` when ``value`` is a ``$name`` variable reference."""
    return isinstance(value, str) and value.startswith("$")


def with_unit(value: object, unit: str = "px") -> str:
    """Resolve ``value`` and append ``unit`` unless it became a ``var()``."""
    resolved = resolve_value(value)
    if not resolved or resolved.startswith(("var(", "calc(")):
        return resolved
    return f"{resolved}{unit}"


def hex_to_rgba(color: str) -> str:
    """Convert ``#RRGGBBAA`` to ``rgba()``, alpha normalised to three decimals.

    Examples
    --------
    >>> hex_to_rgba("#ff000080")
    'rgba(255, 0, 0, 0.502)'
    """
    digits = color.lstrip("#")
    if len(digits) != 8:
        return f"#{digits}"
    try:
        red, green, blue, alpha = (int(digits[i : i + 2], 16) for i in range(0, 8, 2))
    except ValueError:
        return color
    return f"rgba({red}, {green}, {blue}, {format_number(round(alpha / 255, 3))})"


def resolve_color(color: object) -> str:
    """Resolve a hex colour, variable reference or other colour literal."""
    match color:
        case None:
            return ""
        case str() if color.startswith("$"):
            return resolve_value(color)
        case str() if color.startswith("#"):
            digits = color[1:]
            if len(digits) == 3:
                return "#" + "".join(char * 2 for char in digits)
            if len(digits) == 8:
                return hex_to_rgba(color)
            return color
        case _:
            return resolve_value(color)


def _image_size(mode: object) -> str:
    return IMAGE_MODES.get(mode, "cover") if isinstance(mode, str) else "cover"


def gradient_angle(rotation: object) -> str:
    """Convert a counter-clockwise source rotation into CSS gradient degrees."""
    return format_number((360 - as_float(rotation) + 180) % 360)


def build_gradient_value(fill: Node) -> str:
    """Return a ``linear-``, ``radial-`` or ``conic-gradient()`` value, or ``""``."""
    colors = fill.get("colors") or []
    if not isinstance(colors, list) or not colors:
        return ""
    stops: list[str] = []
    for stop in colors:
        if not isinstance(stop, cabc.Mapping):
            continue
        color = resolve_color(stop.get("color", "#000000"))
        position = stop.get("position")
        if is_numeric(position):
            percent = format_number(round_half_up(as_float(position) * 100))
            stops.append(f"{color} {percent}%")
        else:
            stops.append(color)
    joined = ", ".join(stops)
    match fill.get("gradientType", "linear"):
        case "linear":
            return f"linear-gradient({gradient_angle(fill.get('rotation', 0))}deg, {joined})"
        case "radial":
            return f"radial-gradient(ellipse at center, {joined})"
        case "angular":
            return f"conic-gradient({joined})"
        case _:
            return f"linear-gradient({joined})"


def build_image_fill(fill: Node) -> Declarations:
    """Return background declarations for an image fill."""
    url = fill.get("url") or ""
    if not isinstance(url, str) or not url:
        return []
    declarations = [
        f"background-image: url('{url}')",
        f"background-size: {_image_size(fill.get('mode', 'fill'))}",
        "background-position: center",
        "background-repeat: no-repeat",
    ]
    if fill.get("opacity") is not None:
        declarations.append(f"opacity: {resolve_value(fill['opacity'])}")
    return declarations


def _fill_enabled(fill: Node) -> bool:
    return fill.get("enabled") is not False


def build_fills(fills: list[typ.Any]) -> Declarations:
    """Layer several fills: gradients and images stack, the last colour wins."""
    layers: list[str] = []
    background_color = ""
    for fill in fills:
        if not isinstance(fill, cabc.Mapping):
            background_color = resolve_color(fill)
            continue
        if not _fill_enabled(fill):
            continue
        match fill.get("type", "color"):
            case "color":
                background_color = resolve_color(fill.get("color", ""))
            case "gradient":
                gradient = build_gradient_value(fill)
                if gradient:
                    layers.append(gradient)
            case "image":
                size = _image_size(fill.get("mode", "fill"))
                layers.append(f"url('{fill.get('url', '')}') center / {size} no-repeat")
    declarations: Declarations = []
    if layers:
        declarations.append(f"background: {', '.join(layers)}")
    if background_color:
        declarations.append(f"background-color: {background_color}")
    return declarations


def build_fill(fill: object) -> Declarations:
    """Return background declarations for a colour, fill object or fill list."""
    match fill:
        case None:
            return []
        case str():
            return [f"background-color: {resolve_color(fill)}"]
        case list():
            return build_fills(fill) if fill else []
        case cabc.Mapping() if "type" in fill:
            if not _fill_enabled(fill):
                return []
            match fill["type"]:
                case "color":
                    return [f"background-color: {resolve_color(fill.get('color', ''))}"]
                case "gradient":
                    gradient = build_gradient_value(fill)
                    return [f"background: {gradient}"] if gradient else []
                case "image":
                    return build_image_fill(fill)
            return []
        case _:
            return []


def stroke_color(stroke: Node) -> str:
    """Return the stroke colour, defaulting to black."""
    fill = stroke.get("fill")
    match fill:
        case str():
            return resolve_color(fill)
        case cabc.Mapping() if fill.get("type") == "color":
            return resolve_color(fill.get("color", "#000000"))
        case [str() as first, *_]:
            return resolve_color(first)
        case [cabc.Mapping() as first, *_] if "color" in first:
            return resolve_color(first["color"])
    return "#000000"


def build_stroke(stroke: object) -> Declarations:
    """Return uniform or per-side ``border`` declarations (dashed with a dash pattern)."""
    if not isinstance(stroke, cabc.Mapping) or not stroke:
        return []
    color = stroke_color(stroke)
    style = "dashed" if stroke.get("dashPattern") else "solid"
    thickness = stroke.get("thickness", 0)
    if isinstance(thickness, cabc.Mapping):
        return [
            f"border-{side}: {with_unit(thickness[side])} {style} {color}"
            for side in SIDES
            if is_numeric(thickness.get(side)) and as_float(thickness[side]) > 0
        ]
    width = resolve_value(thickness)
    if width in {"", "0"}:
        return []
    return [f"border: {with_unit(thickness)} {style} {color}"]


def build_effects(effects: object) -> Declarations:
    """Return ``box-shadow``, ``filter`` and ``backdrop-filter`` declarations."""
    if isinstance(effects, cabc.Mapping):
        effects = [effects] if "type" in effects else []
    if not isinstance(effects, list):
        return []
    shadows: list[str] = []
    filters: list[str] = []
    backdrops: list[str] = []
    for effect in effects:
        if not isinstance(effect, cabc.Mapping) or effect.get("enabled") is False:
            continue
        match effect.get("type"):
            case "shadow":
                offset = effect.get("offset")
                offset = offset if isinstance(offset, cabc.Mapping) else {}
                inset = "inset " if effect.get("shadowType", "outer") == "inner" else ""
                parts = (
                    with_unit(offset.get("x", 0)),
                    with_unit(offset.get("y", 0)),
                    with_unit(effect.get("blur", 0)),
                    with_unit(effect.get("spread", 0)),
                )
                color = resolve_color(effect.get("color", DEFAULT_SHADOW_COLOR))
                shadows.append(f"{inset}{' '.join(parts)} {color}")
            case "blur":
                filters.append(f"blur({with_unit(effect.get('radius', 0))})")
            case "background_blur":
                backdrops.append(f"blur({with_unit(effect.get('radius', 0))})")
    declarations: Declarations = []
    if shadows:
        declarations.append(f"box-shadow: {', '.join(shadows)}")
    if filters:
        declarations.append(f"filter: {' '.join(filters)}")
    if backdrops:
        backdrop = " ".join(backdrops)
        declarations.extend(
            [f"backdrop-filter: {backdrop}", f"-webkit-backdrop-filter: {backdrop}"]
        )
    return declarations


def build_padding(padding: object) -> Declarations:
    """Return a ``padding`` declaration from a number, variable, or 2/4-item list."""
    if is_numeric(padding) or is_variable(padding):
        return [f"padding: {with_unit(padding)}"]
    if isinstance(padding, list) and len(padding) in {2, 4}:
        return [f"padding: {' '.join(with_unit(value) for value in padding)}"]
    return []


def build_layout(node: Node) -> Declarations:
    """Return flexbox declarations, or ``position: relative`` for free layout."""
    layout = node.get("layout")
    if layout is None or layout == "none":
        return ["position: relative"]
    declarations = [
        "display: flex",
        f"flex-direction: {'column' if layout == 'vertical' else 'row'}",
    ]
    if node.get("gap") is not None:
        declarations.append(f"gap: {with_unit(node['gap'])}")
    if node.get("padding") is not None:
        declarations.extend(build_padding(node["padding"]))
    if node.get("justifyContent") is not None:
        declarations.append(
            f"justify-content: {JUSTIFY_CONTENT.get(node['justifyContent'], 'flex-start')}"
        )
    if node.get("alignItems") is not None:
        declarations.append(f"align-items: {ALIGN_ITEMS.get(node['alignItems'], 'flex-start')}")
    return declarations


def build_typography(node: Node) -> Declarations:
    """Return font, spacing, alignment and decoration declarations."""
    declarations: Declarations = []
    if node.get("fontFamily") is not None:
        family = resolve_value(node["fontFamily"])
        if family.startswith("var("):
            declarations.append(f"font-family: {family}")
        else:
            declarations.append(f'font-family: "{family}", sans-serif')
    if node.get("fontSize") is not None:
        declarations.append(f"font-size: {with_unit(node['fontSize'])}")
    if node.get("fontWeight") is not None:
        declarations.append(f"font-weight: {resolve_value(node['fontWeight'])}")
    if node.get("fontStyle") is not None:
        declarations.append(f"font-style: {resolve_value(node['fontStyle'])}")
    if node.get("letterSpacing") is not None:
        declarations.append(f"letter-spacing: {with_unit(node['letterSpacing'])}")
    if node.get("lineHeight") is not None:
        declarations.append(f"line-height: {resolve_value(node['lineHeight'])}")
    if node.get("textAlign") is not None:
        declarations.append(f"text-align: {resolve_value(node['textAlign'])}")
    decoration = [
        name
        for key, name in (("underline", "underline"), ("strikethrough", "line-through"))
        if node.get(key)
    ]
    if decoration:
        declarations.append(f"text-decoration: {' '.join(decoration)}")
    return declarations


def extract_fallback(sizing: str) -> float | None:
    """Return the number in ``fill_container(120)``-style sizing strings."""
    match = FALLBACK_PATTERN.search(sizing)
    return float(match.group(1)) if match else None


def build_dimension(dim: str, value: object, parent_layout: str = "horizontal") -> Declarations:
    """Return the declarations for one ``width`` or ``height`` value.

    ``fill_container`` grows along the parent's main axis (``flex``) and
    stretches to ``100%`` on the cross axis; ``fit_content`` keeps an optional
    pixel floor taken from the parenthesised fallback.
    """
    if value is None or isinstance(value, bool):
        return []
    if is_numeric(value) and not isinstance(value, str):
        return [f"{dim}: {with_unit(value)}"]
    if not isinstance(value, str):
        return []
    if is_numeric(value):
        return [f"{dim}: {value.strip()}px"]
    if is_variable(value):
        return [f"{dim}: {resolve_value(value)}"]
    fallback = extract_fallback(value)
    if value.startswith("fill_container"):
        main_axis = (dim == "width" and parent_layout == "horizontal") or (
            dim == "height" and parent_layout == "vertical"
        )
        if main_axis:
            basis = f"{format_number(fallback)}px" if fallback is not None else "0%"
            return [f"flex: 1 1 {basis}", f"min-{dim}: 0"]
        return [f"{dim}: 100%"]
    if value.startswith("fit_content"):
        declarations = [f"{dim}: fit-content"]
        if fallback is not None:
            declarations.append(f"min-{dim}: {format_number(fallback)}px")
        return declarations
    return []


def build_sizing(node: Node, parent_layout: str = "horizontal") -> Declarations:
    """Return width and height declarations for ``node``."""
    declarations: Declarations = []
    for dim in ("width", "height"):
        declarations.extend(build_dimension(dim, node.get(dim), parent_layout))
    return declarations


def build_position(node: Node) -> Declarations:
    """Return ``position: absolute`` with ``left``/``top`` from ``x``/``y``."""
    declarations = ["position: absolute"]
    if node.get("x") is not None:
        declarations.append(f"left: {with_unit(node['x'])}")
    if node.get("y") is not None:
        declarations.append(f"top: {with_unit(node['y'])}")
    return declarations


def build_rotation(rotation: object) -> Declarations:
    """Return a clockwise ``rotate()`` for a counter-clockwise source angle.

    Examples
    --------
    >>> build_rotation(90)
    ['transform: rotate(-90deg)']
    >>> build_rotation(0)
    []
    """
    if rotation is None or isinstance(rotation, bool):
        return []
    if is_numeric(rotation):
        degrees = -as_float(rotation)
        if degrees == 0 or not math.isfinite(degrees):
            return []
        return [f"transform: rotate({format_number(degrees)}deg)"]
    resolved = resolve_value(rotation)
    if not resolved:
        return []
    return [f"transform: rotate(calc(-1 * {resolved}))"]


def build_corner_radius(radius: object) -> Declarations:
    """Return a uniform or four-value ``border-radius``."""
    if radius is None or isinstance(radius, bool):
        return []
    if is_numeric(radius):
        return [] if as_float(radius) == 0 else [f"border-radius: {with_unit(radius)}"]
    if is_variable(radius):
        return [f"border-radius: {resolve_value(radius)}"]
    if isinstance(radius, list) and len(radius) == 4:
        return [f"border-radius: {' '.join(with_unit(value) for value in radius)}"]
    return []


def build_opacity(opacity: object) -> Declarations:
    """Return an ``opacity`` declaration unless the node is fully opaque."""
    if opacity is None or (is_numeric(opacity) and as_float(opacity) == 1):
        return []
    return [f"opacity: {resolve_value(opacity)}"]


def build_clip(clip: object) -> Declarations:
    """Return ``overflow: hidden`` for clipping containers."""
    return ["overflow: hidden"] if clip is True else []


def build_text_color(fill: object) -> Declarations:
    """Return ``color`` for text, using ``background-clip`` for gradient fills."""
    match fill:
        case str():
            return [f"color: {resolve_color(fill)}"]
        case cabc.Mapping() if fill.get("type") == "color":
            return [f"color: {resolve_color(fill.get('color', ''))}"]
        case cabc.Mapping() if fill.get("type") == "gradient":
            gradient = build_gradient_value(fill)
            if not gradient:
                return []
            return [
                f"background: {gradient}",
                "-webkit-background-clip: text",
                "-webkit-text-fill-color: transparent",
                "background-clip: text",
            ]
        case [first, *_]:
            return build_text_color(first)
    return []


def build_all_styles(
    node: Node,
    *,
    absolute: bool = False,
    parent_layout: str = "horizontal",
) -> Declarations:
    """Return the declarations shared by every box-like node."""
    declarations = build_sizing(node, parent_layout)
    if absolute:
        declarations.extend(build_position(node))
    declarations.extend(build_corner_radius(node.get("cornerRadius")))
    declarations.extend(build_opacity(node.get("opacity")))
    declarations.extend(build_clip(node.get("clip")))
    declarations.extend(build_rotation(node.get("rotation")))
    return declarations


__all__ = [
    "build_all_styles",
    "build_clip",
    "build_corner_radius",
    "build_dimension",
    "build_effects",
    "build_fill",
    "build_fills",
    "build_gradient_value",
    "build_image_fill",
    "build_layout",
    "build_opacity",
    "build_padding",
    "build_position",
    "build_rotation",
    "build_sizing",
    "build_stroke",
    "build_text_color",
    "build_typography",
    "extract_fallback",
    "gradient_angle",
    "hex_to_rgba",
    "is_variable",
    "resolve_color",
    "resolve_value",
    "stroke_color",
    "with_unit",
]
