from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func, Index
from happening.db.session import Base


class Event(Base):
    __tablename__ = "events"
    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    location = Column(String(255), nullable=False)
    category = Column(String(255), nullable=False)
    # YYYY-MM-DD kept as text; listings sort on it lexicographically
    date = Column(String(10), nullable=False)
    url = Column(String(2048), nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    user_id = Column(Integer, ForeignKey("users.id", name="fk_events_user"), nullable=False)

    __table_args__ = (
        Index("idx_event_date", "date"),
        Index("idx_event_owner", "user_id"),
    )
