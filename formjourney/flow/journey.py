"""Configure a FastAPI app to serve a journey.

Usage:
    from fastapi import FastAPI
    from formjourney import journey

    app = journey(FastAPI(), {
        "base_url": "https://apply.example.com",
        "session": {"secret": "change-me"},
        "steps": [Start(), Name(), Items(), Done()],
        "templates": "templates",
    })

Middleware, outermost first:
    request logging -> session -> request-bound journey -> routes
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Mapping, Union

from fastapi import FastAPI, Request

from ..config import JourneyOptions, resolve_options
from ..errors import ConfigurationError
from ..navigation import step_targets
from ..steps.base import Step
from . import error_pages
from .rendering import make_templates
from .request_journey import RequestBoundJourney
from .routing import bind_step
from .session import install_session

logger = logging.getLogger(__name__)


def step_registry(steps: List[Step]) -> Dict[str, Step]:
    """Map step names to steps, rejecting duplicates."""
    registry: Dict[str, Step] = {}
    for step in steps:
        if step.name in registry:
            raise ConfigurationError(f"Duplicate step name: {step.name}")
        registry[step.name] = step
    return registry


def check_navigation(steps: Dict[str, Step]) -> None:
    """Reject steps that move on without a ``next``, or towards an unknown step.

    Only named targets are checked; conditions inside a branch run per request.
    """
    for step in steps.values():
        if not step.navigates:
            continue
        if step.next is None:
            raise ConfigurationError(f"Step {step.name} has no next step")
        for target in step_targets(step.next):
            if target not in steps:
                raise ConfigurationError(f"Step {step.name} leads to unknown step: {target}")


def journey(app: FastAPI, options: Union[JourneyOptions, Mapping[str, Any]]) -> FastAPI:
    """Wire session, steps and error pages into ``app`` and return it.

    Raises:
        ConfigurationError: If the options are incomplete or inconsistent.
    """
    logger.debug("Initialising journey")

    opts = resolve_options(options)
    steps = step_registry(opts.steps)
    check_navigation(steps)
    templates = make_templates(opts.templates)

    needs_templates = [step.name for step in opts.steps if step.renders]
    if needs_templates and templates is None:
        raise ConfigurationError(f"Steps {needs_templates} render templates but no templates are configured")

    app.state.journey_options = opts
    app.state.journey_steps = steps

    @app.middleware("http")
    async def attach_journey(request: Request, call_next):
        request.state.journey = RequestBoundJourney(request, steps, opts, templates)
        return await call_next(request)

    install_session(app, opts)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        duration = time.time() - start_time
        logger.debug(
            "%s %s %s %.3fs",
            request.method,
            request.url.path,
            response.status_code,
            duration,
        )
        return response

    for step in opts.steps:
        bind_step(app, step)

    error_pages.bind(app, opts.error_pages, templates)

    logger.debug("Finished initialising journey (%d steps)", len(steps))
    return app
