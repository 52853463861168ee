"""Form building blocks: field descriptors, filled fields and forms."""

from .compound import CompoundField, CompoundFieldValue, compound
from .field import FieldDescriptor, FilledField, field_descriptor, make_id
from .fields import bool_field, non_empty_text, text
from .form import FilledForm, Form, error_for, form
from .list_field import ListField, ListFieldValue, list_field
from .validators import matches, max_items, min_items, one_of, required

__all__ = [
    "FieldDescriptor",
    "FilledField",
    "field_descriptor",
    "make_id",
    "text",
    "non_empty_text",
    "bool_field",
    "list_field",
    "ListField",
    "ListFieldValue",
    "compound",
    "CompoundField",
    "CompoundFieldValue",
    "Form",
    "FilledForm",
    "form",
    "error_for",
    "required",
    "one_of",
    "matches",
    "min_items",
    "max_items",
]
