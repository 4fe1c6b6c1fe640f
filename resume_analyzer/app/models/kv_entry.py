"""
KVEntry - per-user opaque key/value storage
"""
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint

from resume_analyzer.app.db.base import Base


class KVEntry(Base):
    __tablename__ = "kv_store"
    __table_args__ = (UniqueConstraint("key", "user_id", name="uq_kv_store_key_user"),)

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(500), nullable=False, index=True)
    value = Column(Text, nullable=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
