"""
Google OAuth 2.0 - consent URL, code exchange and userinfo lookup.
"""
from urllib.parse import urlencode

import httpx

from resume_analyzer.app.core.config import settings
from resume_analyzer.app.core.logging_config import get_logger

logger = get_logger("services.oauth")

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"
HTTP_TIMEOUT = 15.0


class OAuthError(Exception):
    """Token exchange or userinfo request failed."""


def get_google_auth_url(state: str) -> str:
    if not settings.google_client_id:
        raise OAuthError("Google OAuth is not configured")
    params = {
        "client_id": settings.google_client_id,
        "redirect_uri": settings.google_redirect_uri,
        "response_type": "code",
        "scope": "openid email profile",
        "access_type": "online",
        "prompt": "select_account",
        "state": state,
    }
    return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"


def exchange_code_for_token(code: str) -> dict:
    data = {
        "client_id": settings.google_client_id,
        "client_secret": settings.google_client_secret,
        "code": code,
        "grant_type": "authorization_code",
        "redirect_uri": settings.google_redirect_uri,
    }
    with httpx.Client(timeout=HTTP_TIMEOUT) as client:
        response = client.post(GOOGLE_TOKEN_URL, data=data)
    body = response.json() if response.content else {}
    if response.status_code != 200 or "access_token" not in body:
        detail = body.get("error_description") or body.get("error") or f"HTTP {response.status_code}"
        logger.warning("Google token exchange failed status=%s detail=%s", response.status_code, detail)
        raise OAuthError(f"Failed to exchange authorization code: {detail}")
    return body


def get_google_user_info(code: str) -> dict:
    """
    Exchange the authorization code and fetch the profile.
    Returns {id, name, email}; email may be empty when the scope was denied.
    """
    token = exchange_code_for_token(code)
    with httpx.Client(timeout=HTTP_TIMEOUT) as client:
        response = client.get(
            GOOGLE_USERINFO_URL,
            headers={"Authorization": f"Bearer {token['access_token']}"},
        )
    if response.status_code != 200:
        logger.warning("Google userinfo failed status=%s", response.status_code)
        raise OAuthError(f"Failed to fetch user info: HTTP {response.status_code}")
    info = response.json()
    email = info.get("email") or ""
    return {
        "id": str(info.get("id") or info.get("sub") or ""),
        "name": info.get("name") or email.split("@")[0] or "User",
        "email": email,
    }
