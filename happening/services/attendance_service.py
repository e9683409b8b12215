from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from happening.core.logging import logger
from happening.db.repositories import (
    count_attendees as db_count_attendees,
    delete_attendance as db_delete_attendance,
    find_attendance as db_find_attendance,
    find_event_by_id as db_find_event_by_id,
    insert_attendance as db_insert_attendance,
)


class AttendanceService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def toggle(self, user_id: Optional[int], event_id: int) -> int:
        """
        Flip the user's "going" mark for an event and return the new attendee count.

        Anonymous callers (user_id None) only get the current count. Unknown
        events get no attendance row and a count of 0.
        """
        if user_id is None:
            return await db_count_attendees(self.session, event_id)

        if await db_find_event_by_id(self.session, event_id) is None:
            logger.info(f"User {user_id} toggled attendance on missing event {event_id}")
            return 0

        existing = await db_find_attendance(self.session, user_id, event_id)
        if existing is not None:
            await db_delete_attendance(self.session, existing)
            logger.info(f"User {user_id} is no longer going to event {event_id}")
        else:
            await db_insert_attendance(self.session, user_id, event_id)
            logger.info(f"User {user_id} is going to event {event_id}")

        return await db_count_attendees(self.session, event_id)
