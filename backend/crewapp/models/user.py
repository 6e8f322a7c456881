"""
Rider account. Only the columns the social/activity layer reads; auth columns live with the auth service.
updated_at moves on every profile edit and is a snapshot fingerprint signal.
"""
from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from crewapp.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    public_id = Column(String(64), nullable=True, unique=True)
    email = Column(String(256), nullable=False, unique=True)
    username = Column(String(128), nullable=False)
    display_name = Column(String(256), nullable=True)
    avatar_base64 = Column(Text, nullable=True)
    country_flag = Column(String(16), nullable=True)
    is_admin = Column(Boolean, nullable=False, default=False)
    is_coach = Column(Boolean, nullable=False, default=False)
    is_staff = Column(Boolean, nullable=False, default=False)
    is_club_member = Column(Boolean, nullable=False, default=False)
    role = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
