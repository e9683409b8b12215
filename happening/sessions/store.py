"""
Server-side session store backed by the web_sessions table.

The browser only ever sees an opaque session id; the data (signed-in user
id, pending flash messages) lives in the database and expires after a
period of inactivity.
"""
import asyncio
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from happening.core.logging import logger
from happening.db.repositories import (
    delete_expired_sessions,
    delete_session,
    load_session_data,
    save_session_data,
    touch_session,
)


def utcnow() -> datetime:
    # naive UTC; the expires_at column has no timezone
    return datetime.now(timezone.utc).replace(tzinfo=None)


class DatabaseSessionStore:
    """Load, save and expire session data through short-lived DB sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], max_age: int):
        self.session_factory = session_factory
        self.max_age = max_age

    async def load(self, session_id: str) -> Optional[dict]:
        async with self.session_factory() as db:
            return await load_session_data(db, session_id, utcnow())

    async def save(self, session_id: str, data: dict) -> None:
        """Persist data and push the expiry max_age seconds into the future."""
        expires_at = utcnow() + timedelta(seconds=self.max_age)
        async with self.session_factory() as db:
            await save_session_data(db, session_id, data, expires_at)

    async def touch(self, session_id: str) -> None:
        """Push the expiry of an unchanged session max_age seconds forward."""
        expires_at = utcnow() + timedelta(seconds=self.max_age)
        async with self.session_factory() as db:
            await touch_session(db, session_id, expires_at)

    async def delete(self, session_id: str) -> None:
        async with self.session_factory() as db:
            await delete_session(db, session_id)

    async def delete_expired(self) -> int:
        async with self.session_factory() as db:
            deleted = await delete_expired_sessions(db, utcnow())
        if deleted:
            logger.info(f"Deleted {deleted} expired sessions")
        return deleted

    async def continuously_delete_expired(self, interval_seconds: float) -> None:
        """Run delete_expired forever, once per interval. Cancel the task to stop it."""
        while True:
            try:
                await self.delete_expired()
            except Exception as e:
                logger.exception(f"Expired session sweep failed: {e}")
            await asyncio.sleep(interval_seconds)
