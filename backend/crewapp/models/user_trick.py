"""Per-user trick progress, tracked separately for regular and goofy stance.

status / goofy_status: 'todo' | 'in_progress' | 'mastered'. updated_at is the progress feed time.
"""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.sql import func

from crewapp.db.base import Base


class UserTrick(Base):
    __tablename__ = "user_tricks"
    __table_args__ = (UniqueConstraint("user_id", "trick_id", name="uq_user_tricks_user_trick"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    trick_id = Column(Integer, ForeignKey("tricks.id", ondelete="CASCADE"), nullable=False)
    status = Column(String(16), nullable=False, server_default="todo")
    goofy_status = Column(String(16), nullable=True, server_default="todo")
    notes = Column(Text, nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)
