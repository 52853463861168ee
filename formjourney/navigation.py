"""Where a step sends the user once its form is valid.

Usage:
    from formjourney.navigation import branch, goto

    next = goto("Done")
    next = branch(
        goto("Passport").when(lambda ctx: ctx.fields["has_passport"].value),
        goto("IdentityCard"),
    )
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, List, Optional, Union

from .errors import JourneyError

if TYPE_CHECKING:
    from .steps.base import StepContext

Condition = Callable[["StepContext"], bool]


class Redirect:
    """A redirect target, optionally guarded by a condition."""

    def __init__(
        self,
        target: Callable[["StepContext"], str],
        condition: Optional[Condition] = None,
        description: str = "",
        step_name: Optional[str] = None,
    ):
        self.target = target
        self.condition = condition
        self.description = description
        # Journey step this leads to; None for a literal URL.
        self.step_name = step_name

    def when(self, condition: Condition) -> "Redirect":
        return Redirect(self.target, condition, self.description, self.step_name)

    def applies(self, ctx: "StepContext") -> bool:
        return self.condition is None or bool(self.condition(ctx))

    def url(self, ctx: "StepContext") -> str:
        return self.target(ctx)

    def __repr__(self) -> str:
        guard = " (conditional)" if self.condition is not None else ""
        return f"Redirect({self.description}{guard})"


class Branch:
    """Picks the first redirect whose condition holds."""

    def __init__(self, *redirects: Redirect):
        self.redirects = redirects

    def applies(self, ctx: "StepContext") -> bool:
        return any(redirect.applies(ctx) for redirect in self.redirects)

    def url(self, ctx: "StepContext") -> str:
        for redirect in self.redirects:
            if redirect.applies(ctx):
                return redirect.url(ctx)
        raise JourneyError(f"No branch matched for step {ctx.step.name}")


Next = Union[str, Redirect, Branch]


def goto(step_name: str) -> Redirect:
    return Redirect(
        lambda ctx: ctx.journey.url_for(step_name),
        description=step_name,
        step_name=step_name,
    )


def redirect_to(url: str) -> Redirect:
    return Redirect(lambda ctx: url, description=url)


def branch(*redirects: Redirect) -> Branch:
    return Branch(*redirects)


def next_url(next: Optional[Next], ctx: "StepContext") -> str:
    """Resolve a step's ``next`` into a URL."""
    if next is None:
        raise JourneyError(f"Step {ctx.step.name} has no next step")
    if isinstance(next, str):
        next = goto(next)
    return next.url(ctx)


def step_targets(next: Optional[Next]) -> List[str]:
    """Names of the journey steps ``next`` can lead to.

    Literal URLs from ``redirect_to`` are not steps and are left out.
    """
    if next is None:
        return []
    if isinstance(next, str):
        return [next]
    if isinstance(next, Branch):
        return [name for redirect in next.redirects for name in step_targets(redirect)]
    return [next.step_name] if next.step_name is not None else []
