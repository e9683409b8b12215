import asyncio

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError

from happening.api.routes import events as events_router, health as health_router, users as users_router
from happening.core.config import settings
from happening.core.errors import LoginRequired
from happening.core.flash import flash
from happening.core.logging import logger
from happening.core.templating import templates
from happening.db.session import AsyncSessionLocal, engine, init_models
from happening.sessions.middleware import DatabaseSessionMiddleware
from happening.sessions.store import DatabaseSessionStore

app = FastAPI(title="Happening nu")

# The login/signup routes carry the limits; the app needs the same instance for the 429 handler
app.state.limiter = users_router.limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

session_store = DatabaseSessionStore(AsyncSessionLocal, settings.session_max_age)
app.add_middleware(
    DatabaseSessionMiddleware,
    store=session_store,
    cookie_name=settings.SESSION_COOKIE_NAME,
    https_only=settings.SESSION_COOKIE_SECURE,
)

app.include_router(events_router.router)
app.include_router(users_router.router)
app.include_router(health_router.router)


@app.exception_handler(LoginRequired)
async def login_required_handler(request: Request, exc: LoginRequired):
    flash(request, "Please log in first.", "error")
    return RedirectResponse(url="/login", status_code=303)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.opt(exception=exc).error(f"Database error on {request.method} {request.url.path}")
    return templates.TemplateResponse(
        request,
        "error.html",
        {"title": "Something went wrong", "is_logged_in": False, "messages": []},
        status_code=500,
    )


@app.on_event("startup")
async def on_startup():
    await init_models()
    app.state.session_sweeper = asyncio.create_task(
        session_store.continuously_delete_expired(settings.SESSION_SWEEP_INTERVAL_SECONDS)
    )
    logger.info(f"Happening nu started ({settings.ENVIRONMENT})")


@app.on_event("shutdown")
async def on_shutdown():
    sweeper = getattr(app.state, "session_sweeper", None)
    if sweeper is not None:
        sweeper.cancel()
    await engine.dispose()
    logger.info("Happening nu stopped")


def run():
    uvicorn.run("happening.main:app", host="0.0.0.0", port=8000)
