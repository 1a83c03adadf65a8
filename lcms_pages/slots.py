r"""Render element templates with slot data.

Element templates use a small curly-brace syntax:

``{{key}}``
    HTML-escaped output of the resolved value.
``{{{key}}}``
    Raw output, used for rich text the editor has already trusted.
``{{#key}}...{{/key}}``
    Section. A non-empty list renders the body once per item (mapping items
    are merged over the surrounding data, item keys win); any other truthy
    value renders the body once against the surrounding data unchanged.
``{{^key}}...{{/key}}``
    Inverted section, rendered only when the value is falsy or empty.
``{{cta.url}}``
    Dot notation walks nested mappings (and list indexes).

Sections are expanded before any interpolation, innermost first: a nested
section resolves its key against the data passed to :func:`render`, not the
enclosing loop item. Tags inside a removed section never execute. Only the
innermost ten levels of nesting expand; enclosing levels stay literal.
Rendering never raises: unknown paths resolve to an empty string and
malformed tags are emitted literally.

Example
-------
>>> render("<p>{{title}}</p>", {"title": "<b>Hi</b>"})
'<p>&lt;b&gt;Hi&lt;/b&gt;</p>'
>>> render("{{#items}}<li>{{name}}</li>{{/items}}", {"items": [{"name": "a"}, {"name": "b"}]})
'<li>a</li><li>b</li>'
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import functools
import re
import typing as typ
from html import escape

from ._format import format_number

MAX_SECTION_DEPTH = 10
TAG_PATTERN = re.compile(
    r"\{\{\{([a-zA-Z0-9_.]+)\}\}\}|\{\{([#^/]?)([a-zA-Z0-9_.]+)\}\}"
)


@dc.dataclass(frozen=True, slots=True)
class _Text:
    value: str


@dc.dataclass(frozen=True, slots=True)
class _Variable:
    path: str
    raw: bool


@dc.dataclass(frozen=True, slots=True)
class _Section:
    path: str
    inverted: bool
    body: tuple[_Node, ...]
    height: int


_Node: typ.TypeAlias = "_Text | _Variable | _Section"


@dc.dataclass(slots=True)
class _OpenSection:
    path: str
    inverted: bool
    opener: str
    children: list[_Node] = dc.field(default_factory=list)


def _height(children: cabc.Iterable[_Node]) -> int:
    return 1 + max((node.height for node in children if isinstance(node, _Section)), default=0)


@functools.lru_cache(maxsize=256)
def _parse(template: str) -> tuple[_Node, ...]:
    """Parse ``template`` into a tree of text, variable, and section nodes.

    A section whose nesting height exceeds ``MAX_SECTION_DEPTH`` is spliced
    into its parent as literal opener and closer text around its body, so
    the innermost ten levels still expand and every enclosing level stays
    literal.
    """
    root: list[_Node] = []
    stack: list[_OpenSection] = []
    current = root
    position = 0

    for match in TAG_PATTERN.finditer(template):
        if match.start() > position:
            current.append(_Text(template[position : match.start()]))
        position = match.end()
        raw_path, sigil, path = match.groups()
        if raw_path is not None:
            current.append(_Variable(raw_path, raw=True))
            continue
        match sigil:
            case "":
                current.append(_Variable(path, raw=False))
            case "#" | "^":
                section = _OpenSection(path, inverted=sigil == "^", opener=match.group(0))
                stack.append(section)
                current = section.children
            case _:
                if not stack or stack[-1].path != path:
                    current.append(_Text(match.group(0)))
                    continue
                closed = stack.pop()
                current = stack[-1].children if stack else root
                height = _height(closed.children)
                if height > MAX_SECTION_DEPTH:
                    current.append(_Text(closed.opener))
                    current.extend(closed.children)
                    current.append(_Text(match.group(0)))
                else:
                    current.append(
                        _Section(closed.path, closed.inverted, tuple(closed.children), height)
                    )

    if position < len(template):
        current.append(_Text(template[position:]))

    # Unclosed sections fall back to literal text around their parsed body.
    while stack:
        unclosed = stack.pop()
        parent = stack[-1].children if stack else root
        parent.append(_Text(unclosed.opener))
        parent.extend(unclosed.children)
    return tuple(root)


def resolve_path(path: str, data: cabc.Mapping[str, typ.Any]) -> typ.Any:  # noqa: ANN401
    """Resolve a dotted ``path`` against ``data``; missing segments yield ``""``.

    Examples
    --------
    >>> resolve_path("cta.url", {"cta": {"url": "/about"}})
    '/about'
    >>> resolve_path("cta.url", {"cta": "plain"})
    ''
    """
    current: typ.Any = data
    for part in path.split("."):
        if isinstance(current, cabc.Mapping) and part in current:
            current = current[part]
        elif isinstance(current, list) and part.isdigit() and int(part) < len(current):
            current = current[int(part)]
        else:
            return ""
    return current


def _stringify(value: object) -> str:
    match value:
        case None | False:
            return ""
        case True:
            return "1"
        case int() | float():
            return format_number(value)
        case str():
            return value
        case _:
            return ""


def _render_nodes(
    nodes: tuple[_Node, ...],
    data: cabc.Mapping[str, typ.Any],
    root: cabc.Mapping[str, typ.Any],
) -> str:
    parts: list[str] = []
    for node in nodes:
        match node:
            case _Text(value):
                parts.append(value)
            case _Variable(path, raw):
                text = _stringify(resolve_path(path, data))
                parts.append(text if raw else escape(text, quote=True))
            case _Section():
                parts.append(_render_section(node, root))
    return "".join(parts)


def _render_section(section: _Section, root: cabc.Mapping[str, typ.Any]) -> str:
    """Expand ``section`` against the data passed to :func:`render`.

    Sections expand innermost first, so a nested section resolves its key and
    its own body against ``root`` rather than the enclosing loop item. Only
    the interpolations written directly in a loop body see the item's keys.
    """
    value = resolve_path(section.path, root)
    if section.inverted:
        return "" if value else _render_nodes(section.body, root, root)
    if isinstance(value, list) and value:
        rendered: list[str] = []
        for item in value:
            if isinstance(item, cabc.Mapping):
                rendered.append(_render_nodes(section.body, {**root, **item}, root))
            else:
                rendered.append(_render_nodes(section.body, root, root))
        return "".join(rendered)
    if value:
        return _render_nodes(section.body, root, root)
    return ""


def render(template: str, data: cabc.Mapping[str, typ.Any] | None) -> str:
    """Render ``template`` against ``data`` and return the resulting markup.

    Parameters
    ----------
    template : str
        Template source; never modified.
    data : Mapping[str, Any] or None
        Slot data. Anything that is not a mapping is treated as empty.

    Returns
    -------
    str
        Rendered markup. Unresolvable paths render as empty strings.
    """
    if not isinstance(template, str) or not template:
        return ""
    if not isinstance(data, cabc.Mapping):
        data = {}
    return _render_nodes(_parse(template), data, data)


__all__ = ["MAX_SECTION_DEPTH", "TAG_PATTERN", "render", "resolve_path"]
