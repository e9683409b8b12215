"""Database models package."""
from happening.db.models.user import User
from happening.db.models.event import Event
from happening.db.models.user_event import UserEvent
from happening.db.models.web_session import StoredSession

__all__ = ["User", "Event", "UserEvent", "StoredSession"]
