"""The journey as seen by one request."""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterator, MutableMapping, Optional

from fastapi import Request, Response
from fastapi.templating import Jinja2Templates

from ..config import JourneyOptions
from ..content import ContentResolver
from ..errors import JourneyError
from ..steps.base import Step
from .rendering import render


class RequestBoundJourney:
    """Per-request registry of steps, plus the session and journey options.

    Built by middleware before routing, so every handler (journey steps or
    plain routes on the same app) can reach it as ``request.state.journey``.
    """

    def __init__(
        self,
        request: Request,
        steps: Dict[str, Step],
        options: JourneyOptions,
        templates: Optional[Jinja2Templates] = None,
    ):
        self.request = request
        self.steps = steps
        self.options = options
        self.templates = templates
        self.no_session_handler: Optional[Callable[[Request], Any]] = options.no_session_handler

    def __getitem__(self, name: str) -> Step:
        return self.steps[name]

    def __contains__(self, name: object) -> bool:
        return name in self.steps

    def __iter__(self) -> Iterator[Step]:
        return iter(self.steps.values())

    @property
    def session(self) -> Optional[MutableMapping[str, Any]]:
        """The request's session, or ``None`` when no session middleware ran."""
        return self.request.scope.get("session")

    @property
    def content(self) -> Optional[ContentResolver]:
        return self.options.content

    def url(self, path: str) -> str:
        """Prefix ``path`` with the app's root path."""
        return self.request.scope.get("root_path", "") + path

    def url_for(self, name: str) -> str:
        if name not in self.steps:
            raise JourneyError(f"Unknown step: {name}")
        return self.url(self.steps[name].path)

    def render(self, template: str, context: Dict[str, Any], status_code: int = 200) -> Response:
        return render(self.templates, self.request, template, context, status_code=status_code)
