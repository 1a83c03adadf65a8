"""Typed records for element instances and layout blocks."""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import logging
import typing as typ

import msgspec

from .._format import as_float, optional_int

logger = logging.getLogger(__name__)

ALIGNMENTS = ("left", "center", "right")
DISPLAY_MODES = ("flex", "block", "grid")


def decode_json_object(raw: object, *, field: str = "json") -> dict[str, typ.Any]:
    """Decode a JSON object column; anything malformed becomes ``{}``.

    Already-decoded mappings are copied so callers never share the record's
    own dictionary.
    """
    match raw:
        case None | "" | b"":
            return {}
        case cabc.Mapping():
            return dict(raw)
        case str() | bytes():
            try:
                decoded = msgspec.json.decode(raw)
            except msgspec.DecodeError:
                logger.debug("malformed %s ignored", field)
                return {}
            return decoded if isinstance(decoded, dict) else {}
    return {}


def _int(value: object, default: int) -> int:
    return int(as_float(value, float(default)))


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


@dc.dataclass(frozen=True, slots=True)
class ElementInstance:
    """One placement of a catalogue element on a page."""

    id: int
    element_id: int
    slug: str = "unknown"
    name: str = ""
    html_template: str = ""
    css: str = ""
    slot_data: dict[str, typ.Any] = dc.field(default_factory=dict)
    style_data: dict[str, typ.Any] = dc.field(default_factory=dict)
    sort_order: int = 0
    block_id: int | None = None

    @classmethod
    def from_record(cls, record: cabc.Mapping[str, typ.Any]) -> ElementInstance:
        """Build an instance from a joined content-store record."""
        instance_id = _int(record.get("id"), 0)
        slot_raw = record.get("slot_data_json", record.get("slot_data"))
        style_raw = record.get("style_data_json", record.get("style_data"))
        return cls(
            id=instance_id,
            element_id=_int(record.get("element_id", instance_id), instance_id),
            slug=str(record.get("slug") or "unknown"),
            name=str(record.get("name") or ""),
            html_template=str(record.get("html_template") or ""),
            css=str(record.get("css") or ""),
            slot_data=decode_json_object(slot_raw, field="slot data"),
            style_data=decode_json_object(style_raw, field="style data"),
            sort_order=_int(record.get("sort_order"), 0),
            block_id=optional_int(record.get("block_id")),
        )


@dc.dataclass(frozen=True, slots=True)
class Block:
    """A layout block grouping instances under one wrapper."""

    id: int
    columns: int = 1
    width_percent: int = 100
    alignment: str = "center"
    display_mode: str = "block"
    sort_order: int = 0
    name: str = ""

    @classmethod
    def from_record(cls, record: cabc.Mapping[str, typ.Any]) -> Block:
        """Build a block, clamping numbers and defaulting unknown enums.

        Examples
        --------
        >>> Block.from_record({"id": 1, "columns": 99, "width_percent": 1}).columns
        12
        """
        alignment = record.get("alignment")
        display_mode = record.get("display_mode")
        return cls(
            id=_int(record.get("id"), 0),
            columns=_clamp(_int(record.get("columns"), 1), 1, 12),
            width_percent=_clamp(_int(record.get("width_percent"), 100), 10, 100),
            alignment=alignment if alignment in ALIGNMENTS else "center",
            display_mode=display_mode if display_mode in DISPLAY_MODES else "block",
            sort_order=_int(record.get("sort_order"), 0),
            name=str(record.get("name") or ""),
        )

    def style_declarations(self) -> list[str]:
        """Return the wrapper's inline declarations for width, alignment and display."""
        declarations = [f"width: {self.width_percent}%"]
        match self.alignment:
            case "left":
                declarations.append("margin-right: auto")
            case "right":
                declarations.append("margin-left: auto")
            case _:
                declarations.extend(["margin-left: auto", "margin-right: auto"])
        match self.display_mode:
            case "grid":
                declarations.extend(
                    ["display: grid", f"grid-template-columns: repeat({self.columns}, 1fr)"]
                )
            case "flex":
                declarations.extend(["display: flex", "flex-wrap: wrap"])
                if self.columns > 1:
                    declarations.append(f"--lcms-block-columns: {self.columns}")
            case _:
                declarations.append("display: block")
        return declarations


__all__ = [
    "ALIGNMENTS",
    "DISPLAY_MODES",
    "Block",
    "ElementInstance",
    "decode_json_object",
]
