"""Transport wiring: the journey router and the request-bound journey."""

from .journey import check_navigation, journey, step_registry
from .request_journey import RequestBoundJourney
from .routing import StepRoute, bind_step, read_body

__all__ = [
    "journey",
    "step_registry",
    "check_navigation",
    "RequestBoundJourney",
    "StepRoute",
    "bind_step",
    "read_body",
]
