"""Form definitions and the per-request filled form aggregate."""

from __future__ import annotations

from typing import Any, Dict, Iterator, Mapping, MutableMapping, Optional, Tuple

from .field import FieldDescriptor, FilledField, make_id


class FilledForm:
    """The filled fields of one step for one request.

    Attributes:
        fields: Mapping of field name to ``FilledField``.
    """

    def __init__(self, fields: Mapping[str, FilledField]):
        self.fields: Dict[str, FilledField] = dict(fields)
        self._validated = False

    def __getitem__(self, name: str) -> FilledField:
        return self.fields[name]

    def __contains__(self, name: object) -> bool:
        return name in self.fields

    def __iter__(self) -> Iterator[FilledField]:
        return iter(self.fields.values())

    def items(self) -> Iterator[Tuple[str, FilledField]]:
        return iter(self.fields.items())

    @property
    def is_filled(self) -> bool:
        """True when at least one field holds a value."""
        return any(not field.is_empty for field in self.fields.values())

    def validate(self) -> bool:
        """Validate every field, without stopping at the first failure."""
        results = [field.validate() for field in self.fields.values()]
        self._validated = True
        return all(results)

    @property
    def valid(self) -> bool:
        if not self._validated:
            return self.validate()
        return all(field.valid for field in self.fields.values())

    @property
    def errors(self) -> Dict[str, str]:
        return {name: field.error for name, field in self.fields.items() if field.error is not None}

    def serialize(self) -> Dict[str, Any]:
        serialized: Dict[str, Any] = {}
        for field in self.fields.values():
            serialized.update(field.serialize())
        return serialized

    def store(self, session: MutableMapping[str, Any]) -> None:
        """Write this form into ``session``.

        Keys owned by the form's fields are cleared first so an emptied field
        does not leave its previous value behind.
        """
        for field in self.fields.values():
            if field.id is not None:
                session.pop(field.id, None)
        session.update(self.serialize())

    def clone(self, **overrides: FilledField) -> "FilledForm":
        """Return a new form with the named fields replaced."""
        fields = dict(self.fields)
        fields.update(overrides)
        return FilledForm(fields)

    def __repr__(self) -> str:
        return f"FilledForm({list(self.fields)!r})"


class Form:
    """Definition of a step's form: a named set of field descriptors."""

    def __init__(self, fields: Mapping[str, FieldDescriptor]):
        self.fields: Dict[str, FieldDescriptor] = dict(fields)

    def parse(self, body: Optional[Mapping[str, Any]], step_name: Optional[str] = None) -> FilledForm:
        return FilledForm(
            {
                name: descriptor.parse(name, body, id=make_id(step_name, name))
                for name, descriptor in self.fields.items()
            }
        )

    def deserialize(
        self,
        values: Optional[Mapping[str, Any]],
        step_name: Optional[str] = None,
    ) -> FilledForm:
        return FilledForm(
            {
                name: descriptor.deserialize(name, values, id=make_id(step_name, name))
                for name, descriptor in self.fields.items()
            }
        )


def form(**fields: FieldDescriptor) -> Form:
    return Form(fields)


def error_for(filled: FilledForm, path: str) -> Optional[str]:
    """Return the error recorded at ``path``, e.g. ``"items.2"`` or ``"dob.day"``."""
    head, _, rest = path.partition(".")
    if head not in filled:
        return None
    current: Any = filled[head]
    for segment in rest.split(".") if rest else []:
        children = getattr(current, "fields", None)
        if children is None:
            return None
        key: Any = int(segment) if segment.isdigit() else segment
        if key not in children:
            return None
        current = children[key]
    return current.error
