"""Not-found and server-error pages."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import PlainTextResponse
from fastapi.templating import Jinja2Templates
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..config import ErrorPage, ErrorPagesOptions
from .rendering import render

logger = logging.getLogger(__name__)


def error_response(
    page: ErrorPage,
    request: Request,
    status_code: int,
    templates: Optional[Jinja2Templates],
) -> Response:
    if page.template and templates is not None:
        context = {"title": page.title, "message": page.message, "status_code": status_code}
        return render(templates, request, page.template, context, status_code=status_code)
    return PlainTextResponse(page.message, status_code=status_code)


def bind(
    app: FastAPI,
    options: Optional[ErrorPagesOptions] = None,
    templates: Optional[Jinja2Templates] = None,
) -> None:
    """Register error page handlers on ``app``."""
    options = options or ErrorPagesOptions()

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> Response:
        if exc.status_code == 404:
            logger.info("Not found: %s %s", request.method, request.url.path)
            return error_response(options.not_found, request, 404, templates)
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)

    @app.exception_handler(Exception)
    async def server_error(request: Request, exc: Exception) -> Response:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return error_response(options.server_error, request, 500, templates)
