from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import Request, Response
from fastapi.templating import Jinja2Templates

from ..errors import ConfigurationError


def make_templates(templates: Any) -> Optional[Jinja2Templates]:
    """Accept a directory or a ready ``Jinja2Templates``."""
    if templates is None or isinstance(templates, Jinja2Templates):
        return templates
    if isinstance(templates, (str, Path)):
        return Jinja2Templates(directory=str(templates))
    raise ConfigurationError(f"Unsupported templates option: {templates!r}")


def render(
    templates: Optional[Jinja2Templates],
    request: Request,
    name: str,
    context: Dict[str, Any],
    status_code: int = 200,
) -> Response:
    if templates is None:
        raise ConfigurationError(f"Cannot render {name}: no templates configured")
    return templates.TemplateResponse(
        request=request,
        name=name,
        context=context,
        status_code=status_code,
    )
