"""
Repository layer for database operations.

Plain async functions over an AsyncSession for users, events, attendance
(user_events) and stored web sessions. Write helpers commit on success and
roll back on constraint violations.
"""
from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from happening.core.logging import logger
from happening.db.models import Event, StoredSession, User, UserEvent
from happening.schemas import EventListing, NewEventForm


async def insert_user(db: AsyncSession, email: str, username: str, password_hash: str) -> Optional[User]:
    """
    Create a new user.

    Args:
        db: Database session
        email: Email address, stored exactly as given
        username: Display name
        password_hash: Already hashed password

    Returns:
        Created User object, or None if the email is already taken
    """
    user = User(email=email, username=username, password=password_hash)
    db.add(user)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.info(f"Rejected duplicate user insert: {e.orig}")
        return None
    await db.refresh(user)
    return user


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    """
    Retrieve user by email address (exact, case-sensitive match).

    Args:
        db: Database session
        email: User's email address

    Returns:
        User object if found, None otherwise
    """
    q = select(User).where(User.email == email)
    res = await db.execute(q)
    return res.scalars().first()


async def get_user(db: AsyncSession, user_id: int) -> Optional[User]:
    q = select(User).where(User.id == user_id)
    res = await db.execute(q)
    return res.scalars().first()


async def insert_event(db: AsyncSession, form: NewEventForm, user_id: int) -> Event:
    ev = Event(**form.model_dump(), user_id=user_id)
    db.add(ev)
    await db.commit()
    await db.refresh(ev)
    return ev


async def find_event_by_id(db: AsyncSession, event_id: int) -> Optional[Event]:
    q = select(Event).where(Event.id == event_id)
    res = await db.execute(q)
    return res.scalars().first()


async def list_events(db: AsyncSession, user_id: Optional[int] = None) -> List[EventListing]:
    """
    List events by ascending date string, each with creator username and attendee count.

    Args:
        db: Database session
        user_id: Only return events owned by this user when given

    Returns:
        List of EventListing records
    """
    attendees = (
        select(UserEvent.event_id, func.count(UserEvent.id).label("attendee_count"))
        .group_by(UserEvent.event_id)
        .subquery()
    )
    q = (
        select(
            Event,
            User.username,
            func.coalesce(attendees.c.attendee_count, 0).label("attendee_count"),
        )
        .outerjoin(User, User.id == Event.user_id)
        .outerjoin(attendees, attendees.c.event_id == Event.id)
        .order_by(Event.date.asc(), Event.id.asc())
    )
    if user_id is not None:
        q = q.where(Event.user_id == user_id)

    res = await db.execute(q)
    listings = []
    for ev, username, attendee_count in res.all():
        listings.append(
            EventListing(
                id=ev.id,
                title=ev.title,
                url=ev.url,
                location=ev.location,
                date=ev.date,
                category=ev.category,
                user_id=ev.user_id,
                username=username or "unknown",
                attendee_count=attendee_count,
                created_at=ev.created_at,
            )
        )
    return listings


async def delete_event(db: AsyncSession, event_id: int) -> None:
    """Delete an event; its user_events rows go with it through ON DELETE CASCADE."""
    await db.execute(delete(Event).where(Event.id == event_id))
    await db.commit()


async def count_attendees(db: AsyncSession, event_id: int) -> int:
    q = select(func.count(UserEvent.id)).where(UserEvent.event_id == event_id)
    res = await db.execute(q)
    return res.scalar() or 0


async def find_attendance(db: AsyncSession, user_id: int, event_id: int) -> Optional[UserEvent]:
    q = select(UserEvent).where(
        UserEvent.user_id == user_id,
        UserEvent.event_id == event_id,
    )
    res = await db.execute(q)
    return res.scalars().first()


async def insert_attendance(db: AsyncSession, user_id: int, event_id: int) -> Optional[UserEvent]:
    """
    Mark a user as going to an event.

    Returns:
        The new UserEvent, or None when the pair already exists (a concurrent
        request got there first) or the event is gone.
    """
    r = UserEvent(user_id=user_id, event_id=event_id)
    db.add(r)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.info(f"Attendance insert for user {user_id}, event {event_id} rejected: {e.orig}")
        return None
    await db.refresh(r)
    return r


async def delete_attendance(db: AsyncSession, attendance: UserEvent) -> None:
    await db.execute(delete(UserEvent).where(UserEvent.id == attendance.id))
    await db.commit()


async def load_session_data(db: AsyncSession, session_id: str, now: datetime) -> Optional[dict]:
    """Return the data of a live session, or None if it is unknown or expired."""
    q = select(StoredSession).where(
        StoredSession.id == session_id,
        StoredSession.expires_at > now,
    )
    res = await db.execute(q)
    stored = res.scalars().first()
    if stored is None:
        return None
    return dict(stored.data or {})


async def save_session_data(db: AsyncSession, session_id: str, data: dict, expires_at: datetime) -> None:
    stored = await db.get(StoredSession, session_id)
    if stored is None:
        db.add(StoredSession(id=session_id, data=data, expires_at=expires_at))
    else:
        stored.data = data
        stored.expires_at = expires_at
    await db.commit()


async def touch_session(db: AsyncSession, session_id: str, expires_at: datetime) -> None:
    """Move an existing session's expiry without rewriting its data. Unknown ids are ignored."""
    await db.execute(
        update(StoredSession).where(StoredSession.id == session_id).values(expires_at=expires_at)
    )
    await db.commit()


async def delete_session(db: AsyncSession, session_id: str) -> None:
    await db.execute(delete(StoredSession).where(StoredSession.id == session_id))
    await db.commit()


async def delete_expired_sessions(db: AsyncSession, now: datetime) -> int:
    res = await db.execute(delete(StoredSession).where(StoredSession.expires_at <= now))
    await db.commit()
    return res.rowcount or 0
