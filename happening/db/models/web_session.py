from sqlalchemy import Column, String, DateTime, JSON, Index
from happening.db.session import Base


class StoredSession(Base):
    __tablename__ = "web_sessions"
    id = Column(String(64), primary_key=True)
    data = Column(JSON, nullable=False, default=dict)
    expires_at = Column(DateTime, nullable=False)

    __table_args__ = (
        Index("idx_web_sessions_expires_at", "expires_at"),
    )
