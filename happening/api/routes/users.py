"""Sign-up, login and logout pages."""
from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

from happening.auth import get_viewer
from happening.core.errors import InvalidCredentials, SignupRejected
from happening.core.flash import flash, flash_all
from happening.core.logging import logger
from happening.core.templating import render_page
from happening.db.session import get_session
from happening.schemas import Viewer
from happening.services.auth_service import AuthService
from happening.sessions.middleware import regenerate_session_id

router = APIRouter(tags=["users"])
limiter = Limiter(key_func=get_remote_address)


def get_auth_service(session: AsyncSession = Depends(get_session)) -> AuthService:
    return AuthService(session)


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=303)


def _start_session(request: Request, user_id: int) -> None:
    request.session["user_id"] = user_id
    regenerate_session_id(request)


@router.get("/login", response_class=HTMLResponse)
async def login_form(request: Request, viewer: Viewer = Depends(get_viewer)):
    if viewer.is_logged_in:
        return _redirect("/")
    return render_page(request, "partials/login.html", viewer, "Log in")


@router.post("/login")
@limiter.limit("5/minute")
async def login(
    request: Request,
    email: str = Form(default=""),
    password: str = Form(default=""),
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Check credentials and start a session.

    Rate limit: 5 requests per minute
    """
    try:
        user = await auth_service.login(email, password)
    except InvalidCredentials:
        flash(request, "Invalid email or password.", "error")
        return _redirect("/login")

    _start_session(request, user.id)
    flash(request, "Login successful!")
    return _redirect("/")


@router.get("/logout")
async def logout(request: Request):
    user_id = request.session.pop("user_id", None)
    if user_id is not None:
        logger.info(f"User {user_id} logged out")
    flash(request, "You have logged out.")
    return _redirect("/")


@router.get("/signup", response_class=HTMLResponse)
async def signup_form(request: Request, viewer: Viewer = Depends(get_viewer)):
    if viewer.is_logged_in:
        return _redirect("/")
    return render_page(request, "partials/signup.html", viewer, "Sign up")


@router.post("/signup")
@limiter.limit("3/minute")
async def signup(
    request: Request,
    email: str = Form(default=""),
    username: str = Form(default=""),
    password: str = Form(default=""),
    confirm_password: str = Form(default=""),
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Register a new account and log it in.

    Rate limit: 3 requests per minute
    """
    try:
        user = await auth_service.signup(email, username, password, confirm_password)
    except SignupRejected as e:
        flash_all(request, e.messages)
        return _redirect("/signup")

    _start_session(request, user.id)
    flash(request, "Hi!")
    return _redirect("/")
