"""Read-only access to page content records.

Rendering only ever reads from a content store. :class:`ContentStore` is the
protocol the renderer and enrichment providers depend on;
:class:`MemoryContentStore` holds already-materialised records and
:class:`FileContentStore` loads them from a JSON fixture shaped like::

    {
      "elements": {"3": {"slug": "hero", "name": "Hero", "html_template": "...", "css": "..."}},
      "page_elements": [{"id": 7, "content_id": 1, "element_id": 3, "sort_order": 0,
                         "slot_data_json": "{...}", "style_data_json": "{...}"}],
      "page_blocks": [{"id": 2, "content_id": 1, "columns": 3, "sort_order": 0}],
      "page_styles": {"1": {"page_body": {"bg_color": "#ffffff"}}},
      "posts": [{"title": "Hello", "status": "published", "published_at": "2024-05-01T09:00:00Z"}]
    }
"""

from __future__ import annotations

import collections.abc as cabc
import copy
import dataclasses as dc
import datetime as dt
import typing as typ
from pathlib import Path

import msgspec

from .._format import optional_int, parse_timestamp
from .models import decode_json_object

Record: typ.TypeAlias = dict[str, typ.Any]
CATALOGUE_FIELDS = ("slug", "name", "html_template", "css")


class ContentStore(typ.Protocol):
    """Source of page records consumed by the renderer."""

    def load_instances(self, content_id: int) -> list[Record]:
        """Return element-instance records for a page in sort order."""
        ...

    def load_blocks(self, content_id: int, layout_template_id: int | None = None) -> list[Record]:
        """Return block records for a page (or a layout template) in sort order."""
        ...

    def load_page_styles(self, content_id: int) -> Record:
        """Return the page-level style data for a page."""
        ...

    def load_published_posts(self, limit: int, now: dt.datetime) -> list[Record]:
        """Return up to ``limit`` published posts, newest first."""
        ...


def _sort_key(record: cabc.Mapping[str, typ.Any]) -> int:
    return optional_int(record.get("sort_order")) or 0


def _records(value: object) -> list[Record]:
    if not isinstance(value, list):
        return []
    return [dict(row) for row in value if isinstance(row, dict)]


def _keyed(value: object) -> list[tuple[int, typ.Any]]:
    if not isinstance(value, cabc.Mapping):
        return []
    keyed = ((optional_int(key), item) for key, item in value.items())
    return [(key, item) for key, item in keyed if key is not None]


@dc.dataclass
class MemoryContentStore:
    """Content store over in-memory records; returned records are copies."""

    elements: dict[int, Record] = dc.field(default_factory=dict)
    page_elements: list[Record] = dc.field(default_factory=list)
    page_blocks: list[Record] = dc.field(default_factory=list)
    page_styles: dict[int, Record] = dc.field(default_factory=dict)
    posts: list[Record] = dc.field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: cabc.Mapping[str, typ.Any]) -> typ.Self:
        """Build a store from a decoded fixture mapping."""
        elements: dict[int, Record] = {}
        for element_id, value in _keyed(payload.get("elements")):
            if isinstance(value, cabc.Mapping):
                elements[element_id] = dict(value)
        page_styles: dict[int, Record] = {}
        for content_id, value in _keyed(payload.get("page_styles")):
            page_styles[content_id] = decode_json_object(value, field="page styles")
        return cls(
            elements=elements,
            page_elements=_records(payload.get("page_elements")),
            page_blocks=_records(payload.get("page_blocks")),
            page_styles=page_styles,
            posts=_records(payload.get("posts")),
        )

    def load_instances(self, content_id: int) -> list[Record]:
        """Return the page's instance records joined with their catalogue element."""
        rows = [
            row
            for row in self.page_elements
            if optional_int(row.get("content_id")) == content_id
        ]
        joined: list[Record] = []
        for row in sorted(rows, key=_sort_key):
            record = copy.deepcopy(row)
            element = self.elements.get(optional_int(row.get("element_id")) or 0, {})
            for field in CATALOGUE_FIELDS:
                if field in element and field not in record:
                    record[field] = element[field]
            joined.append(record)
        return joined

    def load_blocks(self, content_id: int, layout_template_id: int | None = None) -> list[Record]:
        """Return blocks for a layout template when given, else for the page."""
        if layout_template_id is not None:
            key, wanted = "layout_template_id", layout_template_id
        else:
            key, wanted = "content_id", content_id
        rows = [row for row in self.page_blocks if optional_int(row.get(key)) == wanted]
        return [copy.deepcopy(row) for row in sorted(rows, key=_sort_key)]

    def load_page_styles(self, content_id: int) -> Record:
        """Return a copy of the page's layout style data, or ``{}``."""
        return copy.deepcopy(self.page_styles.get(content_id, {}))

    def load_published_posts(self, limit: int, now: dt.datetime) -> list[Record]:
        """Return published posts visible at ``now``, newest first.

        Posts without a publication date are always visible and sort last.
        """
        visible: list[tuple[dt.datetime | None, Record]] = []
        for post in self.posts:
            if post.get("status") != "published" or post.get("type", "post") != "post":
                continue
            published = parse_timestamp(post.get("published_at"))
            if published is not None and published > now:
                continue
            visible.append((published, post))
        visible.sort(
            key=lambda item: item[0] or dt.datetime.min.replace(tzinfo=dt.UTC),
            reverse=True,
        )
        return [copy.deepcopy(post) for _, post in visible[: max(limit, 0)]]


@dc.dataclass
class FileContentStore(MemoryContentStore):
    """Content store loaded from a JSON fixture file."""

    path: Path | None = None

    @classmethod
    def from_path(cls, path: Path) -> FileContentStore:
        """Decode the fixture at ``path`` with msgspec.

        Raises
        ------
        FileNotFoundError
            If ``path`` does not exist.
        TypeError
            If the fixture's top level is not a JSON object.
        """
        if not path.is_file():
            msg = f"Content store '{path}' not found."
            raise FileNotFoundError(msg)
        payload = msgspec.json.decode(path.read_bytes())
        if not isinstance(payload, dict):
            msg = "Content store fixture must be a JSON object."
            raise TypeError(msg)
        store = cls.from_payload(payload)
        store.path = path
        return store


__all__ = [
    "ContentStore",
    "FileContentStore",
    "MemoryContentStore",
    "Record",
]
