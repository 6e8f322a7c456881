"""Like edge on any subject. Existence = liked; counts are always derived by counting rows."""
from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.sql import func

from crewapp.db.base import Base


class Like(Base):
    __tablename__ = "likes"
    __table_args__ = (
        UniqueConstraint("subject_type", "owner_id", "subject_id", "actor_id", name="uq_likes_edge"),
        Index("ix_likes_subject", "subject_type", "owner_id", "subject_id"),
        {"sqlite_autoincrement": True},
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    subject_type = Column(String(16), nullable=False)  # trick | achievement | event | post | news
    owner_id = Column(Integer, nullable=False)  # owner scope; 0 for global subjects (news)
    subject_id = Column(String(100), nullable=False)
    actor_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
