"""Compile pen design documents (the design tool's JSON scene graph) to HTML/CSS."""

from __future__ import annotations

from .converter import (
    PenConverter,
    convert_document,
    convert_file,
    convert_json,
    extract_variables,
    load_document,
)
from .models import ConversionResult, PenDocumentError, VariableSummary

__all__ = [
    "ConversionResult",
    "PenConverter",
    "PenDocumentError",
    "VariableSummary",
    "convert_document",
    "convert_file",
    "convert_json",
    "extract_variables",
    "load_document",
]
