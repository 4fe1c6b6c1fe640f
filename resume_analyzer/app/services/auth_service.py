"""
Authentication service - user upsert from OAuth identity and server-side sessions
"""
import uuid
from datetime import datetime, timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from resume_analyzer.app.core.config import settings
from resume_analyzer.app.core.logging_config import get_logger
from resume_analyzer.app.core.security import generate_session_token
from resume_analyzer.app.models.user import User
from resume_analyzer.app.models.user_session import UserSession

logger = get_logger("services.auth")


class AuthService:
    """Service for authentication operations"""

    @staticmethod
    def upsert_oauth_user(db: Session, oauth_id: str, name: str, email: str) -> User:
        """Find the user by email (then by OAuth id) or create one. Keeps the display name fresh."""
        email_norm = (email or "").strip().lower()
        user = None
        if email_norm:
            user = db.query(User).filter(User.email == email_norm).first()
        if not user and oauth_id:
            user = db.query(User).filter(User.uuid == oauth_id).first()

        if user:
            if name and user.name != name:
                user.name = name
            if email_norm and not user.email:
                user.email = email_norm
            db.commit()
            db.refresh(user)
            return user

        user = User(
            uuid=oauth_id or str(uuid.uuid4()),
            name=name or email_norm.split("@")[0] or "User",
            email=email_norm or None,
            subscription_tier="free",
            trial_uses=0,
            max_trial_uses=settings.default_max_trial_uses,
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            # lost a race with a concurrent signup for the same email
            db.rollback()
            existing = db.query(User).filter(User.email == email_norm).first()
            if not existing:
                raise
            return existing
        db.refresh(user)
        logger.info("User created user_id=%s email=%s", user.id, user.email)
        return user

    @staticmethod
    def create_session(db: Session, user: User, ttl: timedelta | None = None) -> UserSession:
        session = UserSession(
            user_id=user.id,
            session_token=generate_session_token(),
            expires_at=datetime.utcnow() + (ttl or timedelta(days=settings.session_ttl_days)),
        )
        db.add(session)
        db.commit()
        db.refresh(session)
        return session

    @staticmethod
    def create_user_session(db: Session, oauth_id: str, name: str, email: str) -> tuple[User, str]:
        """Upsert the user and open a new session. Returns (user, session_token)."""
        user = AuthService.upsert_oauth_user(db, oauth_id, name, email)
        session = AuthService.create_session(db, user)
        logger.info("Session created user_id=%s expires_at=%s", user.id, session.expires_at.isoformat())
        return user, session.session_token

    @staticmethod
    def get_user_by_session_token(db: Session, token: str) -> User | None:
        """User for a live session; expired sessions are removed and yield None."""
        if not token:
            return None
        session = db.query(UserSession).filter(UserSession.session_token == token).first()
        if not session:
            return None
        if session.is_expired():
            db.delete(session)
            db.commit()
            return None
        return session.user

    @staticmethod
    def revoke_session(db: Session, token: str) -> bool:
        deleted = (
            db.query(UserSession)
            .filter(UserSession.session_token == token)
            .delete(synchronize_session=False)
        )
        db.commit()
        return deleted > 0
