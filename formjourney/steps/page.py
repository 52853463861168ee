from __future__ import annotations

from fastapi import Response

from .base import Step, StepContext


class Page(Step):
    """A content-only step: GET (and HEAD) renders the template."""

    renders = True

    def handle(self, ctx: StepContext) -> Response:
        if ctx.is_read:
            return ctx.render()
        return ctx.method_not_allowed()
