"""Render individual pen nodes into HTML with one CSS rule per node.

:func:`render_node` dispatches on the node's ``type`` tag. Each renderer
returns a :class:`~lcms_pages.pen.models.ConversionResult` whose ``css`` holds
only the node's own rule; the converter records that rule in a slot reserved
before the children render, so parents always precede their descendants.
"""

from __future__ import annotations

import collections.abc as cabc
import copy
import logging
import math
import re
import typing as typ
from html import escape

from .._format import as_float, format_number, html_comment, is_numeric, round_half_up
from . import styles
from .models import EMPTY_RESULT, ConversionResult

if typ.TYPE_CHECKING:
    from .converter import PenConverter

logger = logging.getLogger(__name__)

SEMANTIC_TAGS = (
    ("header", "header"),
    ("footer", "footer"),
    ("nav", "nav"),
    ("sidebar", "aside"),
    ("section", "section"),
    ("article", "article"),
    ("main", "main"),
)
# (minimum font size, tag, requires weight >= 600)
HEADING_THRESHOLDS = (
    (32.0, "h1", False),
    (24.0, "h2", False),
    (20.0, "h3", False),
    (18.0, "h4", False),
    (16.0, "h5", True),
)
ICON_FONT_CDN = {
    "lucide": "https://cdn.jsdelivr.net/npm/lucide-static@latest/font/lucide.min.css",
    "feather": "https://cdn.jsdelivr.net/npm/feather-icons/dist/feather.css",
    "Material Symbols Outlined": "https://fonts.googleapis.com/css2?family=Material+Symbols+Outlined",
    "Material Symbols Rounded": "https://fonts.googleapis.com/css2?family=Material+Symbols+Rounded",
    "Material Symbols Sharp": "https://fonts.googleapis.com/css2?family=Material+Symbols+Sharp",
    "phosphor": "https://cdn.jsdelivr.net/npm/@phosphor-icons/web@2/src/regular/style.css",
}
REF_STRUCTURAL_KEYS = frozenset({"type", "ref", "descendants", "id", "reusable"})
DEFAULT_POLYGON_SIDES = 6
MAX_POLYGON_SIDES = 360
CLASS_UNSAFE_PATTERN = re.compile(r"[^A-Za-z0-9_-]")
NEWLINE_PATTERN = re.compile(r"(\r\n|\n\r|\n|\r)")

Node: typ.TypeAlias = cabc.Mapping[str, typ.Any]


def node_class(node: Node) -> str:
    """Return the ``pen-{id}`` class name for ``node``."""
    node_id = node.get("id") or "unknown"
    return "pen-" + CLASS_UNSAFE_PATTERN.sub("-", str(node_id))


def css_rule(class_name: str, declarations: list[str]) -> str:
    """Format ``declarations`` as a single ``.class { ...; }`` rule."""
    if not declarations:
        return ""
    return f".{class_name} {{ {'; '.join(declarations)}; }}\n"


def infer_frame_tag(name: object) -> str:
    """Pick a semantic tag from keywords in a frame's name.

    Examples
    --------
    >>> infer_frame_tag("Site Header")
    'header'
    >>> infer_frame_tag("Card")
    'div'
    """
    lowered = str(name or "").lower()
    for keyword, tag in SEMANTIC_TAGS:
        if keyword in lowered:
            return tag
    return "div"


def infer_text_tag(node: Node) -> str:
    """Infer a heading level from font size and weight; ``a`` for links."""
    if node.get("href") is not None:
        return "a"
    font_size = node.get("fontSize")
    if not is_numeric(font_size):
        return "p"
    size = as_float(font_size)
    weight = int(as_float(node.get("fontWeight", "400"), 400))
    for minimum, tag, requires_bold in HEADING_THRESHOLDS:
        if size >= minimum:
            if requires_bold and weight < 600:
                continue
            return tag
    return "p"


def nl2br(text: str) -> str:
    """Insert ``<br />`` before every line break."""
    return NEWLINE_PATTERN.sub(r"<br />\1", text)


def _render_run(run: Node) -> str:
    text = escape(str(run.get("content", "")), quote=True)
    style = "; ".join(
        [*styles.build_typography(run), *styles.build_text_color(run.get("fill"))]
    )
    style_attr = f' style="{escape(style, quote=True)}"' if style else ""
    href = run.get("href")
    if href is not None:
        return f'<a href="{escape(str(href), quote=True)}"{style_attr}>{text}</a>'
    return f"<span{style_attr}>{text}</span>" if style else text


def render_text_content(content: object) -> str:
    """Render a text node's content: a plain string or a list of styled runs."""
    match content:
        case None | "":
            return ""
        case str() if content.startswith("$"):
            return escape(content, quote=True)
        case str():
            return nl2br(escape(content, quote=True))
        case list():
            parts: list[str] = []
            for run in content:
                if isinstance(run, str):
                    parts.append(escape(run, quote=True))
                elif isinstance(run, cabc.Mapping):
                    parts.append(_render_run(run))
            return "".join(parts)
    return ""


def polygon_points(sides: int, width: float, height: float) -> str:
    """Return SVG points for a regular polygon inscribed in ``width`` x ``height``.

    Vertices start at the top centre and proceed clockwise.

    Examples
    --------
    >>> polygon_points(4, 100, 100)
    '50,0 100,50 50,100 0,50'
    """
    cx, cy = width / 2, height / 2
    points: list[str] = []
    for index in range(sides):
        angle = (2 * math.pi * index / sides) - (math.pi / 2)
        x = round_half_up(cx + cx * math.cos(angle), 2)
        y = round_half_up(cy + cy * math.sin(angle), 2)
        points.append(f"{format_number(x)},{format_number(y)}")
    return " ".join(points)


def svg_fill(fill: object) -> str:
    """Return the colour for an SVG ``fill`` attribute, or ``none``."""
    match fill:
        case str():
            return styles.resolve_color(fill)
        case cabc.Mapping() if fill.get("type") == "color":
            return styles.resolve_color(fill.get("color", "none"))
        case [first, *_]:
            return svg_fill(first)
    return "none"


def svg_stroke(stroke: object) -> str:
    """Return ``stroke``/``stroke-width`` attributes for an SVG shape."""
    if not isinstance(stroke, cabc.Mapping) or not stroke:
        return 'stroke="none"'
    color = "none"
    fill = stroke.get("fill")
    if isinstance(fill, str):
        color = styles.resolve_color(fill)
    elif isinstance(fill, cabc.Mapping):
        color = styles.resolve_color(fill.get("color", "none"))
    width = format_number(as_float(stroke.get("thickness")))
    return f'stroke="{escape(color, quote=True)}" stroke-width="{width}"'


def _placement(converter: PenConverter) -> tuple[bool, str]:
    parent_layout = converter.parent_layout
    return parent_layout == "none", parent_layout


def _box_declarations(node: Node, converter: PenConverter) -> list[str]:
    absolute, parent_layout = _placement(converter)
    return [
        *styles.build_fill(node.get("fill")),
        *styles.build_stroke(node.get("stroke")),
        *styles.build_effects(node.get("effect")),
        *styles.build_all_styles(node, absolute=absolute, parent_layout=parent_layout),
    ]


def _sizing_and_position(node: Node, converter: PenConverter) -> list[str]:
    absolute, parent_layout = _placement(converter)
    declarations = styles.build_sizing(node, parent_layout)
    if absolute:
        declarations.extend(styles.build_position(node))
    return declarations


def render_frame(node: Node, converter: PenConverter) -> ConversionResult:
    """Render a frame as a semantic container with flex or free layout."""
    if node.get("reusable"):
        return EMPTY_RESULT
    cls = node_class(node)
    tag = infer_frame_tag(node.get("name", ""))
    rule = css_rule(
        cls,
        [
            "box-sizing: border-box",
            *styles.build_layout(node),
            *_box_declarations(node, converter),
        ],
    )
    children = ""
    if node.get("children"):
        with converter.child_layout(node.get("layout") or "horizontal"):
            children = converter.render_children(node["children"])
    return ConversionResult(f'<{tag} class="{cls}">{children}</{tag}>', rule)


def render_group(node: Node, converter: PenConverter) -> ConversionResult:
    """Render a group as a plain ``div``; children default to free layout."""
    if node.get("reusable"):
        return EMPTY_RESULT
    cls = node_class(node)
    declarations = ["box-sizing: border-box"]
    if "layout" in node:
        declarations.extend(styles.build_layout(node))
    declarations.extend(_sizing_and_position(node, converter))
    declarations.extend(styles.build_effects(node.get("effect")))
    declarations.extend(styles.build_opacity(node.get("opacity")))
    children = ""
    if node.get("children"):
        with converter.child_layout(node.get("layout") or "none"):
            children = converter.render_children(node["children"])
    return ConversionResult(f'<div class="{cls}">{children}</div>', css_rule(cls, declarations))


def render_text(node: Node, converter: PenConverter) -> ConversionResult:
    """Render a text node as a heading, paragraph or link."""
    cls = node_class(node)
    absolute, parent_layout = _placement(converter)
    declarations = [
        "box-sizing: border-box",
        "margin: 0",
        *styles.build_typography(node),
        *styles.build_text_color(node.get("fill")),
        *styles.build_sizing(node, parent_layout),
    ]
    if absolute:
        declarations.extend(styles.build_position(node))
    declarations.extend(styles.build_opacity(node.get("opacity")))
    declarations.extend(styles.build_rotation(node.get("rotation")))
    declarations.extend(styles.build_effects(node.get("effect")))
    if node.get("textGrowth", "auto") == "fixed-width-height":
        declarations.append("overflow: hidden")

    content = render_text_content(node.get("content", ""))
    href = node.get("href")
    if href:
        html = f'<a href="{escape(str(href), quote=True)}" class="{cls}">{content}</a>'
    else:
        tag = infer_text_tag(node)
        html = f'<{tag} class="{cls}">{content}</{tag}>'
    return ConversionResult(html, css_rule(cls, declarations))


def render_rectangle(node: Node, converter: PenConverter) -> ConversionResult:
    """Render a rectangle as an empty styled ``div``."""
    cls = node_class(node)
    declarations = ["box-sizing: border-box", *_box_declarations(node, converter)]
    return ConversionResult(f'<div class="{cls}"></div>', css_rule(cls, declarations))


def render_ellipse(node: Node, converter: PenConverter) -> ConversionResult:
    """Render an ellipse as a ``div`` with ``border-radius: 50%``."""
    cls = node_class(node)
    declarations = [
        "box-sizing: border-box",
        "border-radius: 50%",
        *_box_declarations(node, converter),
    ]
    return ConversionResult(f'<div class="{cls}"></div>', css_rule(cls, declarations))


def render_line(node: Node, converter: PenConverter) -> ConversionResult:
    """Render a line as an ``hr`` with a top border."""
    cls = node_class(node)
    stroke = node.get("stroke")
    stroke = stroke if isinstance(stroke, cabc.Mapping) else {}
    thickness = stroke.get("thickness")
    width = int(as_float(thickness)) if is_numeric(thickness) else 1
    declarations = [
        "box-sizing: border-box",
        "border: none",
        f"border-top: {width}px solid {styles.stroke_color(stroke)}",
        *_sizing_and_position(node, converter),
    ]
    return ConversionResult(f'<hr class="{cls}">', css_rule(cls, declarations))


def _svg(cls: str, node: Node, shape: str) -> str:
    width = format_number(as_float(node.get("width", 100), 100.0))
    height = format_number(as_float(node.get("height", 100), 100.0))
    return (
        f'<svg class="{cls}" viewBox="0 0 {width} {height}" '
        f'width="{width}" height="{height}">{shape}</svg>'
    )


def render_polygon(node: Node, converter: PenConverter) -> ConversionResult:
    """Render a regular polygon as inline SVG."""
    cls = node_class(node)
    sides = int(as_float(node.get("polygonCount"), DEFAULT_POLYGON_SIDES))
    sides = max(3, min(MAX_POLYGON_SIDES, sides))
    points = polygon_points(
        sides,
        as_float(node.get("width", 100), 100.0),
        as_float(node.get("height", 100), 100.0),
    )
    fill = escape(svg_fill(node.get("fill")), quote=True)
    shape = f'<polygon points="{points}" fill="{fill}" {svg_stroke(node.get("stroke"))}/>'
    declarations = [
        *_sizing_and_position(node, converter),
        *styles.build_effects(node.get("effect")),
    ]
    return ConversionResult(_svg(cls, node, shape), css_rule(cls, declarations))


def render_path(node: Node, converter: PenConverter) -> ConversionResult:
    """Render raw path geometry as inline SVG."""
    cls = node_class(node)
    geometry = escape(str(node.get("geometry", "")), quote=True)
    fill = escape(svg_fill(node.get("fill")), quote=True)
    fill_rule = escape(str(node.get("fillRule", "nonzero")), quote=True)
    shape = (
        f'<path d="{geometry}" fill="{fill}" fill-rule="{fill_rule}" '
        f'{svg_stroke(node.get("stroke"))}/>'
    )
    declarations = [
        *_sizing_and_position(node, converter),
        *styles.build_effects(node.get("effect")),
    ]
    return ConversionResult(_svg(cls, node, shape), css_rule(cls, declarations))


def icon_markup(cls: str, family: str, name: str) -> str:
    """Return the family-specific markup for an icon glyph."""
    glyph = escape(name, quote=True)
    if family.startswith("Material Symbols"):
        family_class = family.lower().replace(" ", "-")
        return f'<span class="{cls} {escape(family_class, quote=True)}">{glyph}</span>'
    match family:
        case "phosphor":
            return f'<i class="{cls} ph ph-{glyph}"></i>'
        case "feather":
            return f'<i class="{cls} feather icon-{glyph}"></i>'
        case _:
            return f'<i class="{cls} icon-{glyph}"></i>'


def render_icon_font(node: Node, converter: PenConverter) -> ConversionResult:
    """Render an icon-font glyph and register the family's stylesheet import."""
    cls = node_class(node)
    family = styles.resolve_value(node.get("iconFontFamily", "lucide"))
    name = styles.resolve_value(node.get("iconFontName", ""))
    if family in ICON_FONT_CDN:
        converter.add_icon_font_import(family, ICON_FONT_CDN[family])

    width = node.get("width", 24)
    height = node.get("height", 24)
    size = max(as_float(width, 24.0), as_float(height, 24.0))
    absolute, _ = _placement(converter)
    declarations = [
        f"font-size: {format_number(size)}px",
        f"width: {styles.with_unit(width)}",
        f"height: {styles.with_unit(height)}",
        "display: inline-flex",
        "align-items: center",
        "justify-content: center",
        *styles.build_text_color(node.get("fill")),
    ]
    if absolute:
        declarations.extend(styles.build_position(node))
    return ConversionResult(icon_markup(cls, family, name), css_rule(cls, declarations))


def _find_descendant(
    node: cabc.MutableMapping[str, typ.Any], parts: list[str]
) -> tuple[list[typ.Any], int] | None:
    """Return the containing list and index of the node at an id path."""
    container: typ.Any = node
    found: tuple[list[typ.Any], int] | None = None
    for part in parts:
        children = container.get("children") if isinstance(container, dict) else None
        if not isinstance(children, list):
            return None
        for index, child in enumerate(children):
            if isinstance(child, dict) and child.get("id") == part:
                found = (children, index)
                container = child
                break
        else:
            return None
    return found


def apply_descendants(node: dict[str, typ.Any], descendants: cabc.Mapping[str, typ.Any]) -> None:
    """Apply slash-separated id-path overrides to a cloned component tree.

    An override containing ``type`` replaces the matched node outright; any
    other override is shallow-merged onto it. Unknown paths are ignored.
    """
    for path, override in descendants.items():
        if not isinstance(override, cabc.Mapping):
            continue
        location = _find_descendant(node, str(path).split("/"))
        if location is None:
            logger.debug("descendant override %r matched no node", path)
            continue
        children, index = location
        if "type" in override:
            children[index] = copy.deepcopy(dict(override))
        else:
            children[index].update(copy.deepcopy(dict(override)))


def instantiate_component(node: Node, component: Node) -> dict[str, typ.Any]:
    """Return a deep clone of ``component`` with the ref node's overrides applied."""
    resolved: dict[str, typ.Any] = copy.deepcopy(dict(component))
    for key, value in node.items():
        if key not in REF_STRUCTURAL_KEYS:
            resolved[key] = copy.deepcopy(value)
    resolved["id"] = node.get("id") or f"{node['ref']}-inst"
    resolved["reusable"] = False
    descendants = node.get("descendants")
    if isinstance(descendants, cabc.Mapping) and descendants:
        apply_descendants(resolved, descendants)
    return resolved


def render_ref(node: Node, converter: PenConverter) -> ConversionResult:
    """Instantiate a reusable component, guarding against runaway recursion."""
    ref_id = node.get("ref") or ""
    if not ref_id:
        return ConversionResult(html_comment("Missing ref"))
    with converter.ref_scope() as within_limit:
        if not within_limit:
            logger.debug("ref depth exceeded at %r", ref_id)
            return ConversionResult(html_comment(f"Max ref depth exceeded for: {ref_id}"))
        component = converter.get_component(str(ref_id))
        if component is None:
            logger.debug("component %r not found", ref_id)
            return ConversionResult(html_comment(f"Component not found: {ref_id}"))
        rendered = converter.render_node(instantiate_component(node, component))
    return ConversionResult(rendered.html)


def render_node(node: Node, converter: PenConverter) -> ConversionResult:
    """Dispatch ``node`` to its renderer; disabled and unknown nodes render empty."""
    if node.get("enabled") is False:
        return EMPTY_RESULT
    match node.get("type"):
        case "frame":
            return render_frame(node, converter)
        case "text":
            return render_text(node, converter)
        case "rectangle":
            return render_rectangle(node, converter)
        case "ellipse":
            return render_ellipse(node, converter)
        case "line":
            return render_line(node, converter)
        case "polygon":
            return render_polygon(node, converter)
        case "path":
            return render_path(node, converter)
        case "ref":
            return render_ref(node, converter)
        case "group":
            return render_group(node, converter)
        case "icon_font":
            return render_icon_font(node, converter)
        case "note" | "prompt" | "context":
            return EMPTY_RESULT
        case _:
            return EMPTY_RESULT


__all__ = [
    "HEADING_THRESHOLDS",
    "ICON_FONT_CDN",
    "MAX_POLYGON_SIDES",
    "SEMANTIC_TAGS",
    "apply_descendants",
    "css_rule",
    "icon_markup",
    "infer_frame_tag",
    "infer_text_tag",
    "instantiate_component",
    "nl2br",
    "node_class",
    "polygon_points",
    "render_node",
    "render_text_content",
    "svg_fill",
    "svg_stroke",
]
