"""Typed results and errors produced by the pen document compiler."""

from __future__ import annotations

import dataclasses as dc
import typing as typ


class PenDocumentError(ValueError):
    """Raised when a pen document lacks the required top-level shape."""


@dc.dataclass(frozen=True, slots=True)
class ConversionResult:
    """HTML markup and CSS text produced from a document or a single node."""

    html: str = ""
    css: str = ""


EMPTY_RESULT = ConversionResult()


@dc.dataclass(slots=True)
class VariableSummary:
    """Describe one document variable for a settings screen.

    ``values`` is keyed ``default`` for un-themed entries and
    ``axis:value/axis:value`` for themed ones.
    """

    type: str = "string"
    themed: bool = False
    values: dict[str, typ.Any] = dc.field(default_factory=dict)


__all__ = [
    "EMPTY_RESULT",
    "ConversionResult",
    "PenDocumentError",
    "VariableSummary",
]
