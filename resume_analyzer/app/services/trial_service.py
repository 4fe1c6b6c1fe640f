"""
Free-trial quota: status for display and atomic consumption on analysis.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime

from sqlalchemy import update
from sqlalchemy.orm import Session

from resume_analyzer.app.core.config import FREE_TIER
from resume_analyzer.app.core.logging_config import get_logger
from resume_analyzer.app.models.user import User

logger = get_logger("services.trial")


class TrialExhaustedError(Exception):
    """Free trial used up (or expired) and the user has no paid plan."""


@dataclass
class TrialStatus:
    used: int
    max: int
    remaining: int
    percent_used: float
    expired: bool
    level: str  # ok | low | exhausted
    message: str
    show_upgrade: bool
    subscription_tier: str

    def to_dict(self) -> dict:
        return asdict(self)


def _message(remaining: int) -> str:
    if remaining == 0:
        return "Trial exhausted. Upgrade to continue analyzing resumes."
    if remaining == 1:
        return "Only 1 analysis remaining!"
    return f"{remaining} free analyses remaining"


def is_paid(user: User) -> bool:
    return (user.subscription_tier or FREE_TIER) != FREE_TIER


def get_trial_status(user: User, now: datetime | None = None) -> TrialStatus:
    """remaining = max - used, floored at 0; 0 as well once trial_expires_at has passed."""
    used = max(0, int(user.trial_uses or 0))
    max_uses = max(0, int(user.max_trial_uses or 0))
    expired = bool(user.trial_expires_at and user.trial_expires_at <= (now or datetime.utcnow()))
    remaining = 0 if expired else max(0, max_uses - used)
    percent = min(100.0, round(used / max_uses * 100, 1)) if max_uses else 100.0

    if remaining == 0:
        level = "exhausted"
    elif remaining == 1:
        level = "low"
    else:
        level = "ok"

    return TrialStatus(
        used=used,
        max=max_uses,
        remaining=remaining,
        percent_used=percent,
        expired=expired,
        level=level,
        message=_message(remaining),
        show_upgrade=remaining <= 1,
        subscription_tier=user.subscription_tier or FREE_TIER,
    )


def can_analyze(user: User) -> bool:
    return is_paid(user) or get_trial_status(user).remaining > 0


def consume_trial(db: Session, user: User) -> TrialStatus:
    """
    Count one analysis against the user's trial. Paid tiers are not charged.
    Single conditional UPDATE so concurrent requests cannot exceed the cap.
    """
    if is_paid(user):
        return get_trial_status(user)

    if get_trial_status(user).expired:
        raise TrialExhaustedError("Free trial has expired. Upgrade to continue analyzing resumes.")

    result = db.execute(
        update(User)
        .where(User.id == user.id, User.trial_uses < User.max_trial_uses)
        .values(trial_uses=User.trial_uses + 1)
    )
    db.commit()
    if result.rowcount == 0:
        logger.info("Trial exhausted user_id=%s", user.id)
        raise TrialExhaustedError("Trial exhausted. Upgrade to continue analyzing resumes.")

    db.refresh(user)
    status = get_trial_status(user)
    logger.info("Trial consumed user_id=%s used=%d remaining=%d", user.id, status.used, status.remaining)
    return status


def refund_trial(db: Session, user: User) -> None:
    """Give back one use after a failed analysis (never below zero)."""
    if is_paid(user):
        return
    db.execute(
        update(User)
        .where(User.id == user.id, User.trial_uses > 0)
        .values(trial_uses=User.trial_uses - 1)
    )
    db.commit()
    db.refresh(user)
