"""Per-user article progress: 'fresh' | 'to_read' | 'known'."""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.sql import func

from crewapp.db.base import Base


class UserArticle(Base):
    __tablename__ = "user_articles"
    __table_args__ = (UniqueConstraint("user_id", "article_id", name="uq_user_articles_user_article"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    article_id = Column(Integer, ForeignKey("articles.id", ondelete="CASCADE"), nullable=False)
    status = Column(String(16), nullable=False, server_default="fresh")
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)
