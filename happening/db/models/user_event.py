from sqlalchemy import Column, Integer, DateTime, ForeignKey, func, Index, UniqueConstraint
from happening.db.session import Base


class UserEvent(Base):
    """A user marked an event as "going"."""

    __tablename__ = "user_events"
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", name="fk_user_events_user"), nullable=False)
    event_id = Column(
        Integer,
        ForeignKey("events.id", name="fk_user_events_event", ondelete="CASCADE"),
        nullable=False,
    )
    registered_at = Column(DateTime, nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "event_id", name="uq_user_events_user_event"),
        Index("idx_user_events_event", "event_id"),
    )
