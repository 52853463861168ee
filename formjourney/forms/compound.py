"""Compound fields: a fixed set of named sub-fields read and stored together.

A date of birth made of ``day``, ``month`` and ``year`` is submitted as
``dob.day``, ``dob.month`` and ``dob.year`` and stored as one mapping under the
field id.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from .field import FieldDescriptor, FilledField, Serializer


def _sub_key(key: str, sub: str) -> str:
    return f"{key}.{sub}"


class CompoundFieldValue(FilledField):
    def __init__(
        self,
        descriptor: "CompoundField",
        name: str,
        id: Optional[str],
        fields: Dict[str, FilledField],
    ):
        super().__init__(descriptor, name, id, None)
        self.fields = fields

    @property
    def value(self) -> Dict[str, Any]:
        return {sub: child.value for sub, child in self.fields.items()}

    @property
    def is_empty(self) -> bool:
        return all(child.is_empty for child in self.fields.values())

    def __getitem__(self, sub: str) -> FilledField:
        return self.fields[sub]

    def validate(self) -> bool:
        children_valid = [child.validate() for child in self.fields.values()]
        self.error = self.run_validators()
        return all(children_valid) and self.error is None

    @property
    def valid(self) -> bool:
        return self.error is None and all(child.valid for child in self.fields.values())


def _serialize_compound(filled: FilledField) -> Dict[str, Any]:
    if filled.id is None or filled.is_empty:
        return {}
    stored = {sub: child.value for sub, child in filled.fields.items() if not child.is_empty}
    return {filled.id: stored}


@dataclass(frozen=True)
class CompoundField(FieldDescriptor):
    serializer: Serializer = _serialize_compound
    children: Dict[str, FieldDescriptor] = field(default_factory=dict)

    def fill(self, name: str, id: Optional[str], value: Any) -> CompoundFieldValue:
        value = value or {}
        fields = {
            sub: descriptor.fill(_sub_key(name, sub), _sub_key(id, sub), value.get(sub))
            for sub, descriptor in self.children.items()
        }
        return CompoundFieldValue(self, name, id, fields)

    def parse(
        self,
        name: str,
        body: Optional[Mapping[str, Any]],
        id: Optional[str] = None,
    ) -> CompoundFieldValue:
        body = body or {}
        id = id if id is not None else name
        fields = {
            sub: descriptor.parse(_sub_key(name, sub), body, id=_sub_key(id, sub))
            for sub, descriptor in self.children.items()
        }
        return CompoundFieldValue(self, name, id, fields)

    def deserialize(
        self,
        name: str,
        values: Optional[Mapping[str, Any]],
        id: Optional[str] = None,
    ) -> CompoundFieldValue:
        id = id if id is not None else name
        stored = (values or {}).get(id) or {}
        fields = {}
        for sub, descriptor in self.children.items():
            key = _sub_key(id, sub)
            fields[sub] = descriptor.deserialize(_sub_key(name, sub), {key: stored.get(sub)}, id=key)
        return CompoundFieldValue(self, name, id, fields)


def compound(**children: FieldDescriptor) -> CompoundField:
    """Build a descriptor made of the named ``children``."""
    return CompoundField(children=dict(children))
