"""Scalar field descriptors."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from .field import field_descriptor

TRUTHY = ("yes", "y", "true", "t", "1")
FALSEY = ("no", "n", "false", "f", "0")


def _as_text(name: str, source: Mapping[str, Any]) -> str:
    value = source.get(name)
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _as_optional_text(name: str, source: Mapping[str, Any]) -> Optional[str]:
    value = _as_text(name, source)
    return value if value != "" else None


def _as_bool(name: str, source: Mapping[str, Any]) -> Optional[bool]:
    value = source.get(name)
    if value is None:
        return None
    lowered = _as_text(name, source).strip().lower()
    if lowered in TRUTHY:
        return True
    if lowered in FALSEY:
        return False
    return None


# Empty string when absent.
non_empty_text = field_descriptor(parser=_as_text)

# None when absent or blank.
text = field_descriptor(parser=_as_optional_text)

bool_field = field_descriptor(parser=_as_bool)
