"""Value normalizers for entries read from ``pages.yaml``."""

from __future__ import annotations


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _string_mapping(value: object | None) -> dict[str, str]:
    """Normalize a YAML mapping into ``str -> str`` pairs, skipping null values."""
    if not isinstance(value, dict):
        return {}
    return {str(key): str(item) for key, item in value.items() if item is not None}


__all__ = ["_optional_str", "_string_mapping"]
