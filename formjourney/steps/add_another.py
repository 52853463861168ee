"""Repeatable-list step ("add another").

The step is served at three shapes of URL and the shape decides the mode:

    /items                 -> list    (show every item, continue when valid)
    /items/item-3          -> edit    (create or change item 3)
    /items/item-3/delete   -> delete  (remove item 3, close the gap)

The mode is recomputed from the path on every request; nothing about it is
stored. Items live in the session as one ordered list under
``{step_name}_items``.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence

from fastapi import Response

from ..errors import ConfigurationError, UnknownModeError
from ..forms import FieldDescriptor, FilledForm, Form, ListFieldValue, list_field, make_id
from ..forms.field import Validator
from ..navigation import Next, next_url
from .base import Step, StepContext

LIST_FIELD = "items"
ITEM_FIELD = "item"


class Mode(str, Enum):
    LIST = "list"
    EDIT = "edit"
    DELETE = "delete"


def classify_mode(captures: Mapping[str, Any]) -> Mode:
    """Derive the mode from the ``index`` and ``marker`` path captures."""
    if captures.get("index") is not None:
        if captures.get("marker") is not None:
            return Mode.DELETE
        return Mode.EDIT
    return Mode.LIST


class ModeHandler(ABC):
    """Handles requests for one mode of an ``AddAnother`` step."""

    def __init__(self, step: "AddAnother"):
        self.step = step

    @abstractmethod
    def handle(self, ctx: StepContext) -> Response:
        ...

    def render_page(self, ctx: StepContext, form: Form) -> Response:
        # Re-entering a partly filled list shows its validation state.
        fields = ctx.retrieve(form)
        if fields.is_filled:
            fields.validate()
        return ctx.render()


class ListModeHandler(ModeHandler):
    def handle(self, ctx: StepContext) -> Response:
        if ctx.is_read:
            return self.render_page(ctx, self.step.list_form)
        if ctx.method == "POST":
            ctx.retrieve(self.step.list_form)
            if ctx.validate():
                return ctx.redirect(self.step.next_url(ctx))
            return ctx.render()
        return ctx.method_not_allowed()


class EditModeHandler(ModeHandler):
    def handle(self, ctx: StepContext) -> Response:
        if ctx.is_read:
            ctx.fields = self.step.item_form_for(ctx)
            if ctx.fields.is_filled:
                ctx.fields.validate()
            return ctx.render()
        if ctx.method == "POST":
            ctx.parse(self.step.edit_form)
            if ctx.validate():
                self.step.store_item(ctx, ctx.fields[ITEM_FIELD].value)
                return ctx.redirect(ctx.journey.url(self.step.path))
            return ctx.render()
        return ctx.redirect(ctx.journey.url(self.step.path))


class DeleteModeHandler(ModeHandler):
    def handle(self, ctx: StepContext) -> Response:
        if ctx.method == "GET":
            items = self.step.items(ctx)
            index = self.step.index(ctx)
            # Out-of-range deletes are a no-op.
            if 0 <= index < len(items):
                ctx.fields = FilledForm({LIST_FIELD: items.without(index)})
                ctx.store()
        return ctx.redirect(ctx.journey.url(self.step.path))


class AddAnother(Step):
    """A question step whose answer is a list of items.

    Args:
        name: Step name.
        field: Descriptor for a single item.
        next: Where to go once the list is accepted.
        list_validators: Validators applied to the list as a whole, e.g.
            ``min_items(1, "Add at least one item")``.
    """

    renders = True
    navigates = True

    def __init__(
        self,
        name: str,
        field: Optional[FieldDescriptor] = None,
        next: Optional[Next] = None,
        path: Optional[str] = None,
        template: Optional[str] = None,
        list_validators: Sequence[Validator] = (),
    ):
        super().__init__(name, path=path, template=template)
        if field is None:
            raise ConfigurationError(f"AddAnother step {name} must define a field")
        self.field = field
        self.next = next

        items = list_field(field)
        for validator in list_validators:
            items = items.check(validator)
        self.list_form = Form({LIST_FIELD: items})
        self.edit_form = Form({ITEM_FIELD: field})

        self.handlers: Dict[Mode, ModeHandler] = {
            Mode.LIST: ListModeHandler(self),
            Mode.EDIT: EditModeHandler(self),
            Mode.DELETE: DeleteModeHandler(self),
        }

    @property
    def route(self) -> str:
        return re.escape(self.path) + r"(?:/item-(?P<index>\d+)/?(?:(?P<marker>delete)/?)?)?"

    def mode_for_path(self, path: str) -> Optional[Mode]:
        """Classify ``path``; ``None`` when the path is not served by this step."""
        match = re.fullmatch(self.route, path)
        if match is None:
            return None
        return classify_mode(match.groupdict())

    def mode(self, ctx: StepContext) -> Mode:
        return classify_mode(ctx.path_params)

    def index(self, ctx: StepContext) -> int:
        index = ctx.path_params.get("index")
        return int(index) if index is not None else -1

    def edit_url(self, index: int) -> str:
        return f"{self.path}/item-{index}"

    def delete_url(self, index: int) -> str:
        return f"{self.path}/item-{index}/delete"

    def add_another_url(self, ctx: StepContext) -> str:
        if self.mode(ctx) is Mode.LIST:
            return ctx.journey.url(self.edit_url(len(self.items(ctx))))
        return ctx.journey.url(self.path)

    def post_url(self, ctx: StepContext) -> str:
        if self.mode(ctx) is Mode.EDIT:
            return ctx.journey.url(self.edit_url(self.index(ctx)))
        return ctx.journey.url(self.path)

    def next_url(self, ctx: StepContext) -> str:
        return next_url(self.next, ctx)

    def items(self, ctx: StepContext) -> ListFieldValue:
        """The stored list, read fresh from the session."""
        return self.list_form.deserialize(ctx.session, self.name)[LIST_FIELD]

    def item_form_for(self, ctx: StepContext) -> FilledForm:
        """The single-item form for the edited index, prefilled when it exists."""
        items = self.items(ctx)
        index = self.index(ctx)
        if 0 <= index < len(items):
            item = items[index].renamed(ITEM_FIELD, make_id(self.name, ITEM_FIELD))
            return FilledForm({ITEM_FIELD: item})
        return self.edit_form.parse({}, self.name)

    def store_item(self, ctx: StepContext, value: Any) -> None:
        updated = self.items(ctx).with_item(self.index(ctx), value)
        FilledForm({LIST_FIELD: updated}).store(ctx.session)

    def handle(self, ctx: StepContext) -> Response:
        mode = self.mode(ctx)
        handler = self.handlers.get(mode)
        if handler is None:
            raise UnknownModeError(mode.value)
        return handler.handle(ctx)

    def locals(self, ctx: StepContext) -> Dict[str, Any]:
        values = super().locals(ctx)
        mode = self.mode(ctx)
        values.update(
            {
                "mode": mode.value,
                "index": self.index(ctx),
                "edit_url": lambda index: ctx.journey.url(self.edit_url(index)),
                "delete_url": lambda index: ctx.journey.url(self.delete_url(index)),
                "add_another_url": self.add_another_url(ctx),
            }
        )
        return values
