"""
Free-trial tracker endpoint
"""
from fastapi import APIRouter, Depends

from resume_analyzer.app.core.dependencies import get_current_user
from resume_analyzer.app.models.user import User
from resume_analyzer.app.schemas.user import TrialStatusResponse
from resume_analyzer.app.services.trial_service import get_trial_status

router = APIRouter()


@router.get("", response_model=TrialStatusResponse)
def trial_status(current_user: User = Depends(get_current_user)):
    """Used / remaining / max analyses plus the tracker message and upgrade hint."""
    return get_trial_status(current_user).to_dict()
