"""formjourney - multi-step form journeys for FastAPI.

A journey is an ordered list of steps. Each step is served at its own URL,
keeps its answers in the session and decides where to go next.
"""

from .config import CookieOptions, ErrorPage, ErrorPagesOptions, JourneyOptions, SessionOptions, load_options
from .content import CatalogContentResolver, ContentResolver, StepContent
from .errors import (
    ConfigurationError,
    JourneyError,
    MissingContentError,
    SessionUnavailableError,
    UnknownModeError,
)
from .flow import RequestBoundJourney, journey
from .navigation import branch, goto, redirect_to
from .steps import AddAnother, Mode, Page, Question, Step, StepContext

__all__ = [
    "journey",
    "RequestBoundJourney",
    "JourneyOptions",
    "SessionOptions",
    "CookieOptions",
    "ErrorPage",
    "ErrorPagesOptions",
    "load_options",
    "ContentResolver",
    "CatalogContentResolver",
    "StepContent",
    "Step",
    "StepContext",
    "Page",
    "Question",
    "AddAnother",
    "Mode",
    "goto",
    "branch",
    "redirect_to",
    "JourneyError",
    "ConfigurationError",
    "UnknownModeError",
    "MissingContentError",
    "SessionUnavailableError",
]
