"""Trick catalog (shared, cached)."""
from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from crewapp.db.base import Base


class Trick(Base):
    __tablename__ = "tricks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    public_id = Column(String(64), nullable=True, unique=True)
    name = Column(String(256), nullable=False)
    category = Column(String(64), nullable=False)
    difficulty = Column(String(64), nullable=False)
    description = Column(Text, nullable=True)
    video_url = Column(Text, nullable=True)
    image_url = Column(Text, nullable=True)
    position = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
