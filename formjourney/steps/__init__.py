"""Step variants: content pages, questions and repeatable-list questions."""

from .add_another import (
    AddAnother,
    DeleteModeHandler,
    EditModeHandler,
    ListModeHandler,
    Mode,
    ModeHandler,
    classify_mode,
)
from .base import Step, StepContext, default_path
from .page import Page
from .question import Question

__all__ = [
    "Step",
    "StepContext",
    "default_path",
    "Page",
    "Question",
    "AddAnother",
    "Mode",
    "ModeHandler",
    "ListModeHandler",
    "EditModeHandler",
    "DeleteModeHandler",
    "classify_mode",
]
