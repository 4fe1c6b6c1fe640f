"""
Authentication endpoints - Google OAuth login/callback, current user, logout
"""
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from resume_analyzer.app.core.config import settings
from resume_analyzer.app.core.dependencies import get_current_user, get_db, get_session_token
from resume_analyzer.app.core.logging_config import get_logger
from resume_analyzer.app.core.security import DEFAULT_REDIRECT, create_state_token, verify_state_token
from resume_analyzer.app.models.user import User
from resume_analyzer.app.schemas.user import MeResponse, TrialStatusResponse, UserResponse
from resume_analyzer.app.services import oauth_service
from resume_analyzer.app.services.auth_service import AuthService
from resume_analyzer.app.services.trial_service import get_trial_status

logger = get_logger("api.auth")
router = APIRouter()


def _frontend(path: str) -> str:
    return f"{settings.frontend_url.rstrip('/')}{path}"


def _error_redirect(message: str) -> RedirectResponse:
    return RedirectResponse(
        url=_frontend(f"/?error={quote(str(message), safe='')}"),
        status_code=status.HTTP_302_FOUND,
    )


def set_session_cookie(response: Response, session_token: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session_token,
        max_age=settings.session_ttl_days * 24 * 60 * 60,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        path="/",
    )


@router.get("/google/login")
def google_login(redirect_to: str = DEFAULT_REDIRECT):
    """Start Google sign-in. redirect_to (a local path) is where the callback sends the user."""
    try:
        url = oauth_service.get_google_auth_url(create_state_token(redirect_to))
    except oauth_service.OAuthError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    return RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)


@router.get("/callback")
def oauth_callback(
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    db: Session = Depends(get_db),
):
    """
    Handles the redirect from Google with an authorization code.

    Errors never surface as JSON here: the browser is sent back to the
    frontend with ?error=<message>.
    """
    if error:
        logger.error("OAuth error from provider: %s", error)
        return _error_redirect(error)

    if not code:
        return _error_redirect("missing_code")

    try:
        google_user = oauth_service.get_google_user_info(code)
        if not google_user.get("email"):
            return _error_redirect("no_email")

        _, session_token = AuthService.create_user_session(
            db,
            google_user["id"],
            google_user["name"],
            google_user["email"],
        )

        state_data = verify_state_token(state)
        redirect_to = (state_data or {}).get("redirect_to") or DEFAULT_REDIRECT

        response = RedirectResponse(url=_frontend(redirect_to), status_code=status.HTTP_302_FOUND)
        set_session_cookie(response, session_token)
        logger.info("OAuth login success email=%s redirect_to=%s", google_user["email"], redirect_to)
        return response
    except Exception as e:
        logger.exception("OAuth callback error: %s", e)
        return _error_redirect(str(e) or "Unknown error")


@router.get("/me", response_model=MeResponse)
def get_me(current_user: User = Depends(get_current_user)):
    """Current user with trial status. Used to refresh auth state on app load."""
    return MeResponse(
        user=UserResponse.model_validate(current_user),
        trial=TrialStatusResponse(**get_trial_status(current_user).to_dict()),
    )


@router.post("/logout")
def logout(
    response: Response,
    token: str | None = Depends(get_session_token),
    db: Session = Depends(get_db),
):
    if token:
        AuthService.revoke_session(db, token)
    response.delete_cookie(settings.session_cookie_name, path="/")
    return {"success": True}
