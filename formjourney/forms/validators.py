"""Reusable validators.

A validator takes the ``FilledField`` being checked and returns an error
message, or ``None`` when the value is acceptable. Attach them at definition
time with ``descriptor.check(...)``.
"""

from __future__ import annotations

import re
from typing import Any, Iterable, Optional

from .field import FilledField, Validator


def required(message: str) -> Validator:
    def validator(field: FilledField) -> Optional[str]:
        return message if field.is_empty else None

    return validator


def one_of(choices: Iterable[Any], message: str) -> Validator:
    allowed = tuple(choices)

    def validator(field: FilledField) -> Optional[str]:
        if field.is_empty:
            return None
        return None if field.value in allowed else message

    return validator


def matches(pattern: str, message: str) -> Validator:
    """Fail unless the value fully matches ``pattern``. Empty values pass."""
    compiled = re.compile(pattern)

    def validator(field: FilledField) -> Optional[str]:
        if field.is_empty:
            return None
        return None if compiled.fullmatch(str(field.value)) else message

    return validator


def min_items(count: int, message: str) -> Validator:
    def validator(field: FilledField) -> Optional[str]:
        return message if len(field.value) < count else None

    return validator


def max_items(count: int, message: str) -> Validator:
    def validator(field: FilledField) -> Optional[str]:
        return message if len(field.value) > count else None

    return validator
