"""Step abstraction and the per-request step context.

A ``Step`` is configuration: it is built once at startup, shared by every
request and never mutated afterwards. Everything that belongs to a single
request (the submitted body, the filled form, the derived list mode) lives on
the ``StepContext`` handed to ``Step.handle``.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Mapping, MutableMapping, Optional

from fastapi import Request, Response
from fastapi.responses import PlainTextResponse, RedirectResponse

from ..content import StepContent
from ..errors import SessionUnavailableError
from ..forms import FilledForm, Form

if TYPE_CHECKING:
    from ..flow.request_journey import RequestBoundJourney

logger = logging.getLogger(__name__)

REDIRECT_STATUS = 302

# HEAD is answered like GET.
READ_METHODS = ("GET", "HEAD")


def default_path(name: str) -> str:
    """Kebab-case a step name into a path: ``CountryOfBirth`` -> ``/country-of-birth``."""
    words = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "-", name.strip())
    return "/" + re.sub(r"[\s_]+", "-", words).lower()


class StepContext:
    """Everything one request needs while a step handles it."""

    def __init__(
        self,
        step: "Step",
        request: Request,
        journey: "RequestBoundJourney",
        body: Optional[Mapping[str, Any]] = None,
    ):
        self.step = step
        self.request = request
        self.journey = journey
        self.body: Dict[str, Any] = dict(body or {})
        self.fields: Optional[FilledForm] = None

    @property
    def method(self) -> str:
        return self.request.method

    @property
    def is_read(self) -> bool:
        return self.method in READ_METHODS

    @property
    def path_params(self) -> Dict[str, Any]:
        return dict(self.request.path_params)

    @property
    def session(self) -> MutableMapping[str, Any]:
        session = self.journey.session
        if session is None:
            raise SessionUnavailableError(f"Step {self.step.name} needs a session and none is attached")
        return session

    # -- form state ---------------------------------------------------------

    def parse(self, form: Form) -> FilledForm:
        self.fields = form.parse(self.body, self.step.name)
        return self.fields

    def retrieve(self, form: Form) -> FilledForm:
        self.fields = form.deserialize(self.session, self.step.name)
        return self.fields

    def store(self) -> None:
        if self.fields is not None:
            self.fields.store(self.session)

    def validate(self) -> bool:
        return self.fields.validate() if self.fields is not None else True

    @property
    def valid(self) -> bool:
        return self.fields.valid if self.fields is not None else True

    # -- responses ----------------------------------------------------------

    @property
    def content(self) -> StepContent:
        # Content strings are formatted with the answered field values; unanswered
        # placeholders stay as written.
        params: Dict[str, Any] = {}
        if self.fields is not None:
            params = {name: field.value for name, field in self.fields.items() if not field.is_empty}
        return StepContent(self.journey.content, self.step.name, params)

    def render(self, template: Optional[str] = None, status_code: int = 200) -> Response:
        return self.journey.render(
            template or self.step.template,
            self.step.locals(self),
            status_code=status_code,
        )

    def redirect(self, url: str) -> Response:
        logger.debug("Step %s redirecting to %s", self.step.name, url)
        return RedirectResponse(url, status_code=REDIRECT_STATUS)

    def method_not_allowed(self) -> Response:
        logger.info("Step %s does not accept %s", self.step.name, self.method)
        return PlainTextResponse("Method Not Allowed", status_code=405)


class Step(ABC):
    """One addressable unit of a journey.

    Attributes:
        name: Stable identifier; prefixes session keys and names the step in
            the request-bound journey.
        path: URL path the step is served at.
        template: Template rendered by the step.
    """

    renders = False
    # Steps that move on after a valid submission must name a ``next``.
    navigates = False
    next = None

    def __init__(
        self,
        name: str,
        path: Optional[str] = None,
        template: Optional[str] = None,
    ):
        self.name = name
        self.path = path or default_path(name)
        self.template = template or f"{name}.html"

    @property
    def route(self) -> str:
        """Regular expression the request path must fully match."""
        return re.escape(self.path)

    @abstractmethod
    def handle(self, ctx: StepContext) -> Response:
        ...

    def post_url(self, ctx: StepContext) -> str:
        return ctx.journey.url(self.path)

    def locals(self, ctx: StepContext) -> Dict[str, Any]:
        return {
            "step": self,
            "journey": ctx.journey,
            "fields": ctx.fields,
            "errors": ctx.fields.errors if ctx.fields is not None else {},
            "content": ctx.content,
            "post_url": self.post_url(ctx),
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, path={self.path!r})"
