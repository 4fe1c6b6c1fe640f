"""
Periodic cleanup: remove expired login sessions.
Run via cron or: python -c "from resume_analyzer.app.tasks.cleanup import run_cleanup; print(run_cleanup())"
"""
from datetime import datetime

from sqlalchemy.orm import Session

from resume_analyzer.app.core.logging_config import get_logger
from resume_analyzer.app.db.session import SessionLocal
from resume_analyzer.app.models.user_session import UserSession

logger = get_logger("tasks.cleanup")


def cleanup_expired_sessions(db: Session, now: datetime | None = None) -> dict:
    """Delete sessions whose expires_at has passed."""
    cutoff = now or datetime.utcnow()
    deleted = (
        db.query(UserSession)
        .filter(UserSession.expires_at <= cutoff)
        .delete(synchronize_session=False)
    )
    db.commit()
    logger.info("Expired sessions removed count=%s", deleted)
    return {"deleted": deleted}


def run_cleanup() -> dict:
    """Run cleanup using a new DB session."""
    db = SessionLocal()
    try:
        return cleanup_expired_sessions(db)
    except Exception as e:
        db.rollback()
        logger.exception("Session cleanup failed: %s", e)
        return {"error": str(e), "deleted": 0}
    finally:
        db.close()
