"""List fields: one child field repeated N times.

N comes from the data, not from configuration. On the wire each child is
addressed as ``{name}.{index}``; in the session the whole list is stored as an
ordered sequence under the list's id, with the index implied by position.

Parsing tolerates sparse submissions: ``items.0`` and ``items.2`` yield three
children, the middle one empty. Storage is always dense.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from .field import FieldDescriptor, FilledField, Serializer


def child_key(key: str, index: int) -> str:
    return f"{key}.{index}"


def submitted_indexes(name: str, body: Mapping[str, Any]) -> List[int]:
    """Return the sorted distinct indexes submitted for list ``name``."""
    pattern = re.compile(rf"^{re.escape(name)}\.(\d+)(?:\.|$)")
    indexes = set()
    for key in body:
        match = pattern.match(str(key))
        if match:
            indexes.add(int(match.group(1)))
    return sorted(indexes)


class ListFieldValue(FilledField):
    """Filled list field. ``fields`` maps a dense index to a child field."""

    def __init__(
        self,
        descriptor: "ListField",
        name: str,
        id: Optional[str],
        fields: Dict[int, FilledField],
    ):
        super().__init__(descriptor, name, id, None)
        self.fields = fields

    @property
    def value(self) -> List[Any]:
        return [self.fields[index].value for index in sorted(self.fields)]

    def __len__(self) -> int:
        return len(self.fields)

    def __getitem__(self, index: int) -> FilledField:
        return self.fields[index]

    def __iter__(self):
        return iter(self.fields[index] for index in sorted(self.fields))

    def validate(self) -> bool:
        # Every child is validated so all errors can be shown at once.
        children_valid = [child.validate() for child in self]
        self.error = self.run_validators()
        return all(children_valid) and self.error is None

    @property
    def valid(self) -> bool:
        return self.error is None and all(child.valid for child in self)

    def _rebuilt(self, values: List[Any]) -> "ListFieldValue":
        child = self.descriptor.child
        fields = {
            index: child.fill(child_key(self.name, index), child_key(self.id, index), value)
            for index, value in enumerate(values)
        }
        return ListFieldValue(self.descriptor, self.name, self.id, fields)

    def with_item(self, index: int, value: Any) -> "ListFieldValue":
        """Return a copy with ``value`` at ``index``.

        An index at or beyond the current length appends, so indexes stay
        contiguous.
        """
        values = self.value
        if 0 <= index < len(values):
            values[index] = value
        else:
            values.append(value)
        return self._rebuilt(values)

    def without(self, index: int) -> "ListFieldValue":
        """Return a copy with ``index`` removed and later items shifted down.

        An out-of-range index returns an unchanged copy.
        """
        values = self.value
        if 0 <= index < len(values):
            del values[index]
        return self._rebuilt(values)


def _serialize_list(filled: FilledField) -> Dict[str, Any]:
    values = filled.value
    if filled.id is None or len(values) == 0:
        return {}
    return {filled.id: values}


@dataclass(frozen=True)
class ListField(FieldDescriptor):
    """Descriptor for a list of ``child`` fields."""

    serializer: Serializer = _serialize_list
    child: Optional[FieldDescriptor] = None

    def fill(self, name: str, id: Optional[str], value: Any) -> ListFieldValue:
        values = list(value or [])
        fields = {
            index: self.child.fill(child_key(name, index), child_key(id, index), item)
            for index, item in enumerate(values)
        }
        return ListFieldValue(self, name, id, fields)

    def parse(
        self,
        name: str,
        body: Optional[Mapping[str, Any]],
        id: Optional[str] = None,
    ) -> ListFieldValue:
        body = body or {}
        id = id if id is not None else name
        indexes = submitted_indexes(name, body)
        length = indexes[-1] + 1 if indexes else 0
        fields = {
            index: self.child.parse(child_key(name, index), body, id=child_key(id, index))
            for index in range(length)
        }
        return ListFieldValue(self, name, id, fields)

    def deserialize(
        self,
        name: str,
        values: Optional[Mapping[str, Any]],
        id: Optional[str] = None,
    ) -> ListFieldValue:
        id = id if id is not None else name
        stored = (values or {}).get(id) or []
        fields = {}
        for index, item in enumerate(stored):
            key = child_key(id, index)
            fields[index] = self.child.deserialize(child_key(name, index), {key: item}, id=key)
        return ListFieldValue(self, name, id, fields)


def list_field(child: FieldDescriptor) -> ListField:
    """Build a list descriptor repeating ``child``."""
    return ListField(child=child)
