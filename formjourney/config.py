"""Journey configuration.

Options are pydantic models so they can be built from code or from a YAML
file. Environment variables take precedence over YAML values.

Usage:
    from formjourney.config import load_options

    options = load_options("journey.yaml", steps=[Name, Items, Done])
    journey(app, options)

Environment overrides:
    FORMJOURNEY_BASE_URL        -> base_url
    FORMJOURNEY_SESSION_SECRET  -> session.secret
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Literal, Optional, Union
from urllib.parse import urlparse

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .content import ContentResolver
from .errors import ConfigurationError
from .steps.base import Step

logger = logging.getLogger(__name__)

ENV_BASE_URL = "FORMJOURNEY_BASE_URL"
ENV_SESSION_SECRET = "FORMJOURNEY_SESSION_SECRET"

DEFAULT_SESSION_MAX_AGE = 14 * 24 * 60 * 60


# =============================================================================
# Option Models
# =============================================================================


class CookieOptions(BaseModel):
    """Session cookie attributes."""

    domain: Optional[str] = None
    path: str = "/"
    max_age: Optional[int] = DEFAULT_SESSION_MAX_AGE
    secure: bool = False
    same_site: Literal["lax", "strict", "none"] = "lax"


class SessionOptions(BaseModel):
    """Options for the signed-cookie session middleware."""

    secret: str
    cookie_name: str = "session"
    cookie: CookieOptions = Field(default_factory=CookieOptions)


class ErrorPage(BaseModel):
    template: Optional[str] = None
    title: str
    message: str


class ErrorPagesOptions(BaseModel):
    not_found: ErrorPage = Field(
        default_factory=lambda: ErrorPage(
            title="Page not found",
            message="If you typed the web address, check it is correct.",
        )
    )
    server_error: ErrorPage = Field(
        default_factory=lambda: ErrorPage(
            title="Sorry, we're having technical problems",
            message="Please try again in a few minutes.",
        )
    )


class JourneyOptions(BaseModel):
    """Everything ``journey()`` needs to configure an app.

    Attributes:
        base_url: Public URL of the service; its hostname is the default
            session cookie domain.
        session: Session middleware options, or a callable that receives the
            app and installs its own session middleware.
        steps: The journey's steps, in order. Names must be unique.
        error_pages: Not-found and server-error page options.
        templates: Template directory, or a ready ``Jinja2Templates``.
        content: Resolver for step content.
        no_session_handler: Called with the request when a step needs the
            session and none is attached; returns the response to send.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    base_url: Optional[str] = None
    session: Union[SessionOptions, Callable[..., Any], None] = None
    steps: List[Step] = Field(default_factory=list)
    error_pages: ErrorPagesOptions = Field(default_factory=ErrorPagesOptions)
    templates: Optional[Any] = None
    content: Optional[ContentResolver] = None
    no_session_handler: Optional[Callable[..., Any]] = None


# =============================================================================
# Resolution
# =============================================================================


def cookie_domain(base_url: Optional[str]) -> str:
    """Hostname of ``base_url``; raises when no base URL is configured."""
    if not base_url:
        raise ConfigurationError("Must provide a base_url")
    hostname = urlparse(base_url).hostname
    if not hostname:
        raise ConfigurationError(f"Could not read a hostname from base_url '{base_url}'")
    return hostname


def resolve_options(options: Union[JourneyOptions, Dict[str, Any]]) -> JourneyOptions:
    """Validate options and fill in derived defaults.

    Raises:
        ConfigurationError: If options are invalid or the cookie domain cannot
            be derived.
    """
    if not isinstance(options, JourneyOptions):
        try:
            options = JourneyOptions.model_validate(dict(options))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid journey options: {e}") from e

    if callable(options.session):
        return options

    if options.session is None:
        # Fail early: without a base_url we cannot build a cookie domain later.
        cookie_domain(options.base_url)
        return options

    session = options.session
    if session.cookie.domain is None:
        cookie = session.cookie.model_copy(update={"domain": cookie_domain(options.base_url)})
        session = session.model_copy(update={"cookie": cookie})
    return options.model_copy(update={"session": session})


# =============================================================================
# YAML Loading
# =============================================================================


def _read_yaml(path: Path) -> Dict[str, Any]:
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Journey config {path} must be a mapping")
    return data


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    base_url = os.environ.get(ENV_BASE_URL)
    if base_url:
        data["base_url"] = base_url

    secret = os.environ.get(ENV_SESSION_SECRET)
    if secret:
        session = dict(data.get("session") or {})
        session["secret"] = secret
        data["session"] = session
    return data


def load_options(path: Optional[Union[str, Path]] = None, **overrides: Any) -> JourneyOptions:
    """Load options from a YAML file, then the environment, then ``overrides``.

    Steps, templates and other code objects are passed as ``overrides``.
    """
    data: Dict[str, Any] = {}
    if path is not None:
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Journey config not found: {path}")
        data = _read_yaml(path)
        logger.debug("Loaded journey config from %s", path)

    data = _apply_env_overrides(data)
    data.update(overrides)
    return resolve_options(data)
