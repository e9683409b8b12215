"""Jinja2 templates and the context shared by every page."""
from pathlib import Path

from fastapi import Request
from fastapi.templating import Jinja2Templates

from happening.core.flash import pop_flashed_messages
from happening.schemas import Viewer

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def render_page(request: Request, template: str, viewer: Viewer, title: str, status_code: int = 200, **context):
    """
    Render a full page.

    Adds login state, the viewer's username, the page title, and consumes
    pending flash messages so they are shown exactly once.
    """
    ctx = {
        "is_logged_in": viewer.is_logged_in,
        "logged_in_username": viewer.username,
        "messages": pop_flashed_messages(request),
        "title": title,
    }
    ctx.update(context)
    return templates.TemplateResponse(request, template, ctx, status_code=status_code)
