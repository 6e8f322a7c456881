"""Shop orders. Rows with a booking_date are session bookings shown in the snapshot."""
from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.sql import func

from crewapp.db.base import Base


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    public_id = Column(String(64), nullable=True, unique=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    product_name = Column(String(256), nullable=True)
    product_category = Column(String(64), nullable=True)
    booking_date = Column(Date, nullable=True)
    booking_time = Column(String(16), nullable=True)
    status = Column(String(32), nullable=False, server_default="pending_payment")
    amount = Column(Numeric(10, 2), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
