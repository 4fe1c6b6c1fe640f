"""
Resume - uploaded resume file metadata, analysis payload and ATS score
"""
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from resume_analyzer.app.db.base import Base, JSONType


class Resume(Base):
    __tablename__ = "resumes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    file_name = Column(String(500), nullable=False)
    file_path = Column(String(1000), nullable=False)  # object key in the bucket
    file_size = Column(Integer, nullable=True)
    mime_type = Column(String(100), nullable=True)
    storage_url = Column(Text, nullable=True)

    analysis_data = Column(JSONType, nullable=True)
    ats_score = Column(Integer, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
