"""Binding steps to the app's router.

Steps describe their URL as a regular expression (so a repeatable-list step
can serve ``/items``, ``/items/item-3`` and ``/items/item-3/delete`` from one
definition). Starlette routes use ``{param}`` templates, so ``StepRoute``
matches on the step's pattern instead. Named groups become path params.
"""

from __future__ import annotations

import inspect
import logging
import re
from typing import Any, Dict, Tuple

from fastapi import FastAPI, Request, Response
from starlette.routing import Match, Route
from starlette.types import Scope

from ..errors import SessionUnavailableError
from ..steps.base import Step, StepContext

logger = logging.getLogger(__name__)

BODYLESS_METHODS = ("GET", "HEAD", "OPTIONS", "DELETE")


def _route_path(scope: Scope) -> str:
    path = scope["path"]
    root_path = scope.get("root_path", "")
    if root_path and path.startswith(root_path):
        return path[len(root_path):] or "/"
    return path


class StepRoute(Route):
    """A route matched by a step's regular expression, for every method."""

    def __init__(self, step: Step, endpoint: Any):
        super().__init__(step.path, endpoint, name=step.name)
        # Route.handle answers 405 for methods outside this set; steps do that themselves.
        self.methods = None
        self.step = step
        self.pattern = re.compile(step.route)

    def matches(self, scope: Scope) -> Tuple[Match, Scope]:
        if scope["type"] != "http":
            return Match.NONE, {}
        match = self.pattern.fullmatch(_route_path(scope))
        if match is None:
            return Match.NONE, {}
        path_params = dict(scope.get("path_params", {}))
        path_params.update({key: value for key, value in match.groupdict().items() if value is not None})
        return Match.FULL, {"endpoint": self.endpoint, "path_params": path_params}


async def read_body(request: Request) -> Dict[str, Any]:
    """Read a submitted form (or JSON object) into a plain dict.

    Repeated form keys become lists.
    """
    if request.method in BODYLESS_METHODS:
        return {}

    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        payload = await request.json()
        return dict(payload) if isinstance(payload, dict) else {}

    body: Dict[str, Any] = {}
    form = await request.form()
    for key, value in form.multi_items():
        if key in body:
            existing = body[key]
            body[key] = existing + [value] if isinstance(existing, list) else [existing, value]
        else:
            body[key] = value
    return body


def step_endpoint(step: Step):
    async def endpoint(request: Request) -> Response:
        journey = request.state.journey
        body = await read_body(request)
        ctx = StepContext(step, request, journey, body)
        try:
            return step.handle(ctx)
        except SessionUnavailableError:
            if journey.no_session_handler is None:
                raise
            logger.info("No session for step %s; using no_session_handler", step.name)
            response = journey.no_session_handler(request)
            if inspect.isawaitable(response):
                response = await response
            return response

    endpoint.__name__ = f"{step.name}_endpoint"
    return endpoint


def bind_step(app: FastAPI, step: Step) -> StepRoute:
    route = StepRoute(step, step_endpoint(step))
    app.router.routes.append(route)
    logger.debug("Bound step %s at %s", step.name, step.route)
    return route
