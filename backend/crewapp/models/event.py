"""Sessions and events riders can join."""
from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from crewapp.db.base import Base


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    public_id = Column(String(64), nullable=True, unique=True)
    name = Column(String(256), nullable=False)
    date = Column(Date, nullable=False)
    time = Column(String(16), nullable=False)
    location = Column(String(256), nullable=False)
    location_url = Column(Text, nullable=True)
    spots = Column(Integer, nullable=False, default=10)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
