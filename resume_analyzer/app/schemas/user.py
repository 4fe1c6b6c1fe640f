"""
User Pydantic schemas for request/response validation
"""
from pydantic import BaseModel, ConfigDict
from typing import Optional


class TrialStatusResponse(BaseModel):
    """Free-trial usage as shown by the trial tracker"""
    used: int
    max: int
    remaining: int
    percent_used: float
    expired: bool
    level: str
    message: str
    show_upgrade: bool
    subscription_tier: str


class UserResponse(BaseModel):
    """Schema for user response"""
    id: Optional[int] = None
    uuid: str
    name: str
    email: Optional[str] = None
    subscription_tier: str = "free"

    model_config = ConfigDict(from_attributes=True)


class MeResponse(BaseModel):
    """Current user plus trial status"""
    user: UserResponse
    trial: TrialStatusResponse
