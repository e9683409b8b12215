"""
Session middleware backed by DatabaseSessionStore.

Exposes the data as ``request.session`` (same interface as Starlette's
cookie SessionMiddleware), but the cookie only carries an opaque id.
"""
import json

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from happening.core.security import new_session_id
from happening.sessions.store import DatabaseSessionStore

_REGENERATE_KEY = "_regenerate"


def regenerate_session_id(request: Request) -> None:
    """Issue a new session id at the end of this request (call on login)."""
    request.session[_REGENERATE_KEY] = True


class DatabaseSessionMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app,
        store: DatabaseSessionStore,
        cookie_name: str = "happening_session",
        https_only: bool = False,
    ):
        super().__init__(app)
        self.store = store
        self.cookie_name = cookie_name
        self.https_only = https_only

    async def dispatch(self, request: Request, call_next):
        session_id = request.cookies.get(self.cookie_name)
        had_cookie = session_id is not None
        data = await self.store.load(session_id) if session_id else None
        if data is None:
            session_id = None
            data = {}
        loaded = _fingerprint(data)

        # handlers see this dict as request.session and mutate it in place
        request.scope["session"] = data
        response = await call_next(request)
        session = data

        regenerate = session.pop(_REGENERATE_KEY, False)
        if regenerate and session_id:
            await self.store.delete(session_id)
            session_id = None

        if session_id and session and _fingerprint(session) == loaded:
            # unchanged by the handler: slide the expiry, keep the stored data as is
            await self.store.touch(session_id)
            self._set_cookie(response, session_id)
        elif session:
            session_id = session_id or new_session_id()
            # round-trip through JSON so the stored copy is detached from the request
            await self.store.save(session_id, json.loads(json.dumps(session)))
            self._set_cookie(response, session_id)
        elif session_id:
            await self.store.delete(session_id)
            response.delete_cookie(self.cookie_name, path="/")
        elif had_cookie:
            response.delete_cookie(self.cookie_name, path="/")
        return response

    def _set_cookie(self, response, session_id: str) -> None:
        response.set_cookie(
            self.cookie_name,
            session_id,
            max_age=self.store.max_age,
            path="/",
            httponly=True,
            samesite="lax",
            secure=self.https_only,
        )


def _fingerprint(data: dict) -> str:
    return json.dumps(data, sort_keys=True)
