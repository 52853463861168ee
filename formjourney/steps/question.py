from __future__ import annotations

from typing import Optional

from fastapi import Response

from ..forms import Form
from ..navigation import Next, next_url
from .base import Step, StepContext


class Question(Step):
    """A step that renders a form, validates submissions and stores them.

    GET shows previously stored answers without validating them; the user
    has not had a chance to fix anything yet. POST parses the body, validates
    every field and either stores and moves on, or re-renders with errors.
    """

    renders = True
    navigates = True

    def __init__(
        self,
        name: str,
        form: Form,
        next: Optional[Next] = None,
        path: Optional[str] = None,
        template: Optional[str] = None,
    ):
        super().__init__(name, path=path, template=template)
        self.form = form
        self.next = next

    def next_url(self, ctx: StepContext) -> str:
        return next_url(self.next, ctx)

    def handle(self, ctx: StepContext) -> Response:
        if ctx.is_read:
            ctx.retrieve(self.form)
            return ctx.render()
        if ctx.method == "POST":
            ctx.parse(self.form)
            if ctx.validate():
                ctx.store()
                return ctx.redirect(self.next_url(ctx))
            return ctx.render()
        return ctx.method_not_allowed()
