"""
Resume Pydantic schemas
"""
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class ResumeSummary(BaseModel):
    """Row in the user's resume list"""
    id: int
    file_name: str
    file_path: str
    file_size: Optional[int] = None
    mime_type: Optional[str] = None
    ats_score: Optional[int] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ResumeUploadResponse(BaseModel):
    id: int
    file_name: str
    resume_path: str
    image_path: Optional[str] = None
    ats_score: Optional[int] = None
    feedback: Optional[dict[str, Any]] = None
    trial: dict[str, Any]
    preview_error: Optional[str] = None


class ResumeReviewResponse(BaseModel):
    """Everything the review page needs for one resume"""
    id: int
    job_title: str = ""
    job_description: str = ""
    resume_path: str = ""
    image_path: str = ""
    resume_url: Optional[str] = None
    image_url: Optional[str] = None
    feedback: Optional[dict[str, Any]] = None
    ats_score: int = 0
