"""
Token helpers - session tokens and signed OAuth state
"""
import secrets
import uuid
from datetime import datetime, timedelta

from jose import JWTError, jwt

from resume_analyzer.app.core.config import settings

DEFAULT_REDIRECT = "/upload"


def generate_session_token() -> str:
    return secrets.token_urlsafe(48)


def is_safe_redirect(path: str | None) -> bool:
    """Only same-site absolute paths: '/x' but not '//host' or 'https://host'."""
    if not path or not isinstance(path, str):
        return False
    return path.startswith("/") and not path.startswith("//") and "\\" not in path


def create_state_token(redirect_to: str | None = None, expires_delta: timedelta | None = None) -> str:
    """Signed OAuth state carrying where to send the user after login."""
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.oauth_state_ttl_minutes))
    payload = {
        "redirect_to": redirect_to if is_safe_redirect(redirect_to) else DEFAULT_REDIRECT,
        "nonce": uuid.uuid4().hex,
        "exp": expire,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def verify_state_token(state: str | None) -> dict | None:
    """Decoded state payload, or None when missing, tampered or expired."""
    if not state:
        return None
    try:
        payload = jwt.decode(state, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
    if not is_safe_redirect(payload.get("redirect_to")):
        payload["redirect_to"] = None
    return payload
