"""Small coercion and formatting helpers shared across the package."""

from __future__ import annotations

import datetime as dt
import math
import re
import typing as typ

NUMERIC_PATTERN = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?\s*$")


def is_numeric(value: object) -> bool:
    """Return ``True`` for finite numbers and numeric strings (booleans excluded)."""
    match value:
        case bool():
            return False
        case int():
            return True
        case float():
            return math.isfinite(value)
        case str():
            return bool(NUMERIC_PATTERN.match(value)) and math.isfinite(float(value))
        case _:
            return False


def as_float(value: object, default: float = 0.0) -> float:
    """Coerce ``value`` to ``float``, returning ``default`` when it is not numeric."""
    if not is_numeric(value):
        return default
    return float(typ.cast("str | float", value))


def optional_int(value: object) -> int | None:
    """Return ``value`` as an integer, or ``None`` when it is missing or not numeric.

    Examples
    --------
    >>> optional_int("12")
    12
    >>> optional_int("twelve") is None
    True
    """
    if not is_numeric(value):
        return None
    return int(float(typ.cast("str | float", value)))


def parse_timestamp(value: object) -> dt.datetime | None:
    """Return a timezone-aware UTC datetime parsed from ``value``, or ``None``.

    ISO 8601 strings (a trailing ``Z`` included) and datetimes are accepted;
    naive values are taken to be UTC.
    """
    match value:
        case dt.datetime():
            parsed = value
        case str():
            text = value.strip()
            if text.endswith("Z"):
                text = f"{text[:-1]}+00:00"
            try:
                parsed = dt.datetime.fromisoformat(text)
            except ValueError:
                return None
        case _:
            return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=dt.UTC)
    return parsed.astimezone(dt.UTC)


def format_number(value: float) -> str:
    """Render a number the way CSS expects it: no trailing ``.0``, no ``-0``.

    Examples
    --------
    >>> format_number(10.0)
    '10'
    >>> format_number(-0.0)
    '0'
    >>> format_number(0.502)
    '0.502'
    """
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return str(value)
    if not math.isfinite(value) or value == 0:
        return "0"
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def round_half_up(value: float, digits: int = 0) -> float:
    """Round half away from zero, unlike the banker's rounding of :func:`round`."""
    factor = 10**digits
    scaled = abs(value) * factor
    rounded = math.floor(scaled + 0.5) / factor
    return math.copysign(rounded, value)


def html_comment(text: str) -> str:
    """Return an HTML comment whose body cannot terminate the comment early."""
    safe = text.replace("--", "- -").replace(">", "&gt;")
    return f"<!-- {safe} -->"


__all__ = [
    "NUMERIC_PATTERN",
    "as_float",
    "format_number",
    "html_comment",
    "is_numeric",
    "optional_int",
    "parse_timestamp",
    "round_half_up",
]
