"""Earned achievement tiers. achieved_at is the achievement_earned feed time."""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.sql import func

from crewapp.db.base import Base


class UserAchievement(Base):
    __tablename__ = "user_achievements"
    __table_args__ = (UniqueConstraint("user_id", "achievement_id", name="uq_user_achievements"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    achievement_id = Column(String(100), nullable=False)
    tier = Column(String(20), nullable=False, server_default="bronze")
    achieved_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)
