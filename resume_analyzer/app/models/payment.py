"""
Payment - Razorpay order lifecycle (created -> paid | failed)
"""
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from resume_analyzer.app.db.base import Base


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    razorpay_order_id = Column(String(100), unique=True, nullable=False, index=True)
    razorpay_payment_id = Column(String(100), nullable=True)
    razorpay_signature = Column(String(256), nullable=True)
    amount = Column(Integer, nullable=False)  # paise
    currency = Column(String(10), default="INR")
    payment_status = Column(String(50), nullable=True)
    plan_id = Column(String(100), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
