from sqlalchemy import Column, Integer, String, DateTime, func
from happening.db.session import Base


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)
    joined_at = Column(DateTime, nullable=False, server_default=func.now())
