from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from happening.core.errors import LoginRequired
from happening.db.repositories import get_user
from happening.db.session import get_session
from happening.schemas import Viewer


async def get_viewer(
    request: Request,
    session: AsyncSession = Depends(get_session),
) -> Viewer:
    """
    Resolve the signed-in user from the session.

    Anonymous requests get an empty Viewer. A session that still points at a
    user who no longer exists is treated as anonymous and the stale id is
    dropped.
    """
    user_id = request.session.get("user_id")
    if user_id is None:
        return Viewer()

    user = await get_user(session, user_id)
    if user is None:
        request.session.pop("user_id", None)
        return Viewer()
    return Viewer(user_id=user.id, username=user.username)


async def require_viewer(viewer: Viewer = Depends(get_viewer)) -> Viewer:
    """
    Dependency for pages and actions that need a signed-in user.

    Raises:
        LoginRequired: handled app-wide by redirecting to /login
    """
    if not viewer.is_logged_in:
        raise LoginRequired()
    return viewer
