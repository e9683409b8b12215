from typing import List

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from happening.core.errors import EventNotFound, EventRejected, NotEventOwner
from happening.core.logging import logger
from happening.db.models import Event
from happening.db.repositories import (
    delete_event as db_delete_event,
    find_event_by_id as db_find_event_by_id,
    insert_event as db_insert_event,
    list_events as db_list_events,
)
from happening.schemas import EventListing, NewEventForm, Viewer, validation_messages


class EventService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_all_events(self) -> List[EventListing]:
        return await db_list_events(self.session)

    async def list_my_events(self, viewer: Viewer) -> List[EventListing]:
        """Events owned by the viewer; empty for anonymous viewers."""
        if not viewer.is_logged_in:
            return []
        return await db_list_events(self.session, user_id=viewer.user_id)

    async def create_event(self, user_id: int, **fields: str) -> Event:
        try:
            form = NewEventForm(**fields)
        except ValidationError as e:
            raise EventRejected(validation_messages(e))

        event = await db_insert_event(self.session, form, user_id)
        logger.info(f"User {user_id} created event {event.id}")
        return event

    async def delete_event(self, user_id: int, event_id: int) -> None:
        """
        Delete an event owned by user_id.

        Raises:
            EventNotFound: No such event
            NotEventOwner: The event belongs to someone else
        """
        event = await db_find_event_by_id(self.session, event_id)
        if event is None:
            raise EventNotFound()
        if event.user_id != user_id:
            logger.warning(f"User {user_id} tried to delete event {event_id} owned by {event.user_id}")
            raise NotEventOwner()

        await db_delete_event(self.session, event_id)
        logger.info(f"User {user_id} deleted event {event_id}")
