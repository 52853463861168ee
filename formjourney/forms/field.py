"""Field descriptors and the filled fields they produce.

A ``FieldDescriptor`` is an immutable template shared by every request. It
knows how to pull a value out of a submitted body (``parser``), out of the
session (``deserializer``), how to write it back (``serializer``) and which
validators apply to it. Applying a descriptor to concrete input yields a
``FilledField`` which lives for a single request.

Keys:
    - Wire (submitted body) keys use the bare field name, e.g. ``first_name``.
    - Session keys use the field id, ``{step_name}_{field_name}``, so the same
      field name on two steps does not collide in a shared session.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

Parser = Callable[[str, Mapping[str, Any]], Any]
Deserializer = Callable[[str, Mapping[str, Any]], Any]
Serializer = Callable[["FilledField"], Dict[str, Any]]
Validator = Callable[["FilledField"], Optional[str]]


def make_id(step_name: Optional[str], field_name: str) -> str:
    """Return the session key for ``field_name`` on ``step_name``."""
    if not step_name:
        return field_name
    return f"{step_name}_{field_name}"


def is_empty_value(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def _lookup(name: str, source: Optional[Mapping[str, Any]]) -> Any:
    if source is None:
        return None
    return source.get(name)


def default_parser(name: str, body: Mapping[str, Any]) -> Any:
    return _lookup(name, body)


def default_deserializer(name: str, values: Mapping[str, Any]) -> Any:
    return _lookup(name, values)


def default_serializer(filled: "FilledField") -> Dict[str, Any]:
    """Serialize to ``{id: value}``, or ``{}`` for an unset value."""
    if filled.id is None or filled.is_empty:
        return {}
    return {filled.id: filled.value}


class FilledField:
    """A descriptor applied to one request: identity, value and error."""

    def __init__(
        self,
        descriptor: "FieldDescriptor",
        name: str,
        id: Optional[str],
        value: Any,
    ):
        self.descriptor = descriptor
        self.name = name
        self.id = id
        self._value = value
        self.error: Optional[str] = None

    @property
    def value(self) -> Any:
        return self._value

    @property
    def is_empty(self) -> bool:
        return is_empty_value(self.value)

    def serialize(self) -> Dict[str, Any]:
        return self.descriptor.serializer(self)

    def run_validators(self) -> Optional[str]:
        """Return the first error raised by the descriptor's validators."""
        for validator in self.descriptor.validators:
            error = validator(self)
            if error is not None:
                return error
        return None

    def validate(self) -> bool:
        """Run validation, record the error (if any) and return validity.

        Repeated calls give the same answer: the previous error is cleared
        before validators run again.
        """
        self.error = self.run_validators()
        return self.error is None

    @property
    def valid(self) -> bool:
        return self.error is None

    def renamed(self, name: str, id: Optional[str]) -> "FilledField":
        """Return a copy of this field under a new name and id."""
        return self.descriptor.fill(name, id, self.value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, id={self.id!r}, value={self.value!r})"


@dataclass(frozen=True)
class FieldDescriptor:
    """Immutable template describing how one field is read, written and checked."""

    parser: Parser = default_parser
    deserializer: Deserializer = default_deserializer
    serializer: Serializer = default_serializer
    validators: Tuple[Validator, ...] = field(default_factory=tuple)

    def check(self, validator: Validator) -> "FieldDescriptor":
        """Return a new descriptor with ``validator`` appended.

        Validators run in the order they were attached; the first error wins.
        """
        return replace(self, validators=self.validators + (validator,))

    def fill(self, name: str, id: Optional[str], value: Any) -> FilledField:
        return FilledField(self, name, id, value)

    def parse(
        self,
        name: str,
        body: Optional[Mapping[str, Any]],
        id: Optional[str] = None,
    ) -> FilledField:
        """Build a filled field from a submitted body. Never raises on absence."""
        value = self.parser(name, body or {})
        return self.fill(name, id if id is not None else name, value)

    def deserialize(
        self,
        name: str,
        values: Optional[Mapping[str, Any]],
        id: Optional[str] = None,
    ) -> FilledField:
        """Build a filled field from stored session values."""
        key = id if id is not None else name
        value = self.deserializer(key, values or {})
        return self.fill(name, key, value)


def field_descriptor(
    parser: Optional[Parser] = None,
    deserializer: Optional[Deserializer] = None,
    serializer: Optional[Serializer] = None,
) -> FieldDescriptor:
    """Build a descriptor, falling back to the defaults for missing hooks.

    A missing deserializer reuses the parser: most fields read a stored value
    the same way they read a submitted one.
    """
    parser = parser or default_parser
    return FieldDescriptor(
        parser=parser,
        deserializer=deserializer or parser,
        serializer=serializer or default_serializer,
    )
