"""
One-shot flash messages kept in the server-side session.

A message flashed during a write action is shown by the next rendered page
and then dropped.
"""
from typing import List

from fastapi import Request

from happening.schemas import FlashMessage

_SESSION_KEY = "_messages"


def flash(request: Request, message: str, level: str = "info") -> None:
    pending = list(request.session.get(_SESSION_KEY, []))
    pending.append({"level": level, "message": message})
    request.session[_SESSION_KEY] = pending


def flash_all(request: Request, messages: List[str], level: str = "error") -> None:
    for message in messages:
        flash(request, message, level)


def pop_flashed_messages(request: Request) -> List[FlashMessage]:
    """Return pending messages and remove them from the session."""
    pending = request.session.pop(_SESSION_KEY, [])
    return [FlashMessage(**item) for item in pending]
