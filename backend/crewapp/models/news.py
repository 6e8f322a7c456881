"""Club news with per-user read and hidden markers."""
from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.sql import func

from crewapp.db.base import Base


class News(Base):
    __tablename__ = "news"

    id = Column(Integer, primary_key=True, autoincrement=True)
    public_id = Column(String(64), nullable=True, unique=True)
    title = Column(String(256), nullable=False)
    message = Column(Text, nullable=True)
    type = Column(String(32), nullable=False, server_default="info")
    emoji = Column(String(16), nullable=True)
    event_details = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class UserNewsRead(Base):
    __tablename__ = "user_news_read"
    __table_args__ = (UniqueConstraint("user_id", "news_id", name="uq_user_news_read"), {"sqlite_autoincrement": True})

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    news_id = Column(Integer, ForeignKey("news.id", ondelete="CASCADE"), nullable=False)
    read_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class UserNewsHidden(Base):
    __tablename__ = "user_news_hidden"
    __table_args__ = (UniqueConstraint("user_id", "news_id", name="uq_user_news_hidden"), {"sqlite_autoincrement": True})

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    news_id = Column(Integer, ForeignKey("news.id", ondelete="CASCADE"), nullable=False)
    hidden_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
