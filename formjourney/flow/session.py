"""Session middleware wiring.

The session itself is Starlette's signed-cookie session; this module only
translates ``SessionOptions`` into middleware arguments.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware

from ..config import JourneyOptions, SessionOptions

logger = logging.getLogger(__name__)


def session_middleware_kwargs(options: SessionOptions) -> dict:
    cookie = options.cookie
    return {
        "secret_key": options.secret,
        "session_cookie": options.cookie_name,
        "max_age": cookie.max_age,
        "path": cookie.path,
        "same_site": cookie.same_site,
        "https_only": cookie.secure,
        "domain": cookie.domain,
    }


def install_session(app: FastAPI, options: JourneyOptions) -> None:
    """Install the configured session provider on ``app``."""
    if options.session is None:
        logger.warning("No session configured; question steps will not be able to store answers")
        return

    if callable(options.session):
        logger.debug("Installing custom session provider")
        options.session(app)
        return

    kwargs = session_middleware_kwargs(options.session)
    logger.debug(
        "Installing session middleware (cookie=%s, domain=%s)",
        kwargs["session_cookie"],
        kwargs["domain"],
    )
    app.add_middleware(SessionMiddleware, **kwargs)
