"""Exception types raised by formjourney.

Validation failures are not exceptions: they are recorded on the filled field
and surfaced by re-rendering the form. Everything here signals a fault that a
user cannot fix by resubmitting.
"""

from __future__ import annotations


class JourneyError(Exception):
    """Base class for journey faults."""


class ConfigurationError(JourneyError):
    """Raised at startup when the journey is configured inconsistently."""


class UnknownModeError(JourneyError):
    """Raised when a step's path pattern and mode classifier disagree."""

    def __init__(self, mode: str):
        super().__init__(f"mode: {mode} not recognised")
        self.mode = mode


class MissingContentError(JourneyError):
    """Raised when a content path has no entry in the resolver."""

    def __init__(self, path: str):
        super().__init__(f"No content for {path}")
        self.path = path


class SessionUnavailableError(JourneyError):
    """Raised when a step needs the session and none is attached."""
