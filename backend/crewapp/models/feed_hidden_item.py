"""Feed items a viewer chose to hide, keyed by the stable feed item id."""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.sql import func

from crewapp.db.base import Base


class FeedHiddenItem(Base):
    __tablename__ = "feed_hidden_items"
    __table_args__ = (UniqueConstraint("user_id", "item_id", name="uq_feed_hidden_items"), {"sqlite_autoincrement": True})

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    item_id = Column(String(255), nullable=False)
    hidden_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
