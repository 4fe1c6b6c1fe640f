"""
User model - OAuth identity, subscription tier and free-trial counters
"""
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String

from resume_analyzer.app.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    uuid = Column(String(255), unique=True, nullable=False, index=True)  # OAuth subject or random uuid
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=True, index=True)

    subscription_tier = Column(String(50), default="free")
    trial_uses = Column(Integer, default=0, nullable=False, index=True)
    max_trial_uses = Column(Integer, default=3, nullable=False)
    trial_expires_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
