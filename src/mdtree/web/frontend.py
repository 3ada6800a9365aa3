"""HTML page rendering for the mdtree web UI."""

from __future__ import annotations

import logging
from importlib.resources import files
from typing import Any

from fastapi import Request
from fastapi.responses import PlainTextResponse, Response
from fastapi.templating import Jinja2Templates
from jinja2 import TemplateError

LOGGER = logging.getLogger(__name__)

TEMPLATES_DIR = files("mdtree.web").joinpath("templates")
STATIC_DIR = files("mdtree.web").joinpath("static")

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def render_page(
    request: Request, name: str, context: dict[str, Any], *, status_code: int = 200
) -> Response:
    """Render a page template; template errors become a generic 500."""
    context.setdefault("base", request.scope.get("root_path", ""))
    context.setdefault("search", "")
    try:
        return templates.TemplateResponse(request, name, context, status_code=status_code)
    except TemplateError:
        LOGGER.exception("Failed to render %s for %s", name, request.url.path)
        return PlainTextResponse("Internal Server Error", status_code=500)
