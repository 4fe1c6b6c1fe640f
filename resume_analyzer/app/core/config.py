"""
Application configuration settings.
Loads from .env file first (overrides shell env for local dev), then pydantic reads from environment.
Production: set env vars in the platform (Vercel, Docker, etc.); .env is optional.

All backend-related configs and constants are centralized here.
"""
from pathlib import Path

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env path: resume_analyzer/.env (absolute path, works regardless of cwd)
_BASE_DIR = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = (_BASE_DIR / ".env").resolve()

# Load .env into environment BEFORE pydantic reads. override=True ensures .env
# values override any shell env (e.g. stale AWS_ACCESS_KEY_ID from elsewhere).
# When .env doesn't exist (prod), this is a no-op; platform env vars are used.
if _ENV_FILE.exists():
    load_dotenv(_ENV_FILE, override=True)


class Settings(BaseSettings):
    """Application settings. Source: env vars (after dotenv load)."""

    # App
    app_name: str = "AI Resume Analyzer"
    app_version: str = "1.0.0"
    port: int = 8001
    frontend_url: str = ""  # prefix for OAuth redirects, e.g. https://example.com/ai-resume-builder
    cors_origins: str = "*"  # comma-separated

    # Database
    database_url: str = "sqlite:///./resume_analyzer.db"
    auto_create_tables: bool = True

    # Auth / sessions
    secret_key: str = "your-secret-key-change-in-production"
    algorithm: str = "HS256"
    session_cookie_name: str = "session_token"
    session_ttl_days: int = 7
    session_cookie_secure: bool = True
    oauth_state_ttl_minutes: int = 10

    # Google OAuth
    google_client_id: str = ""
    google_client_secret: str = ""
    google_redirect_uri: str = ""

    # Object storage (S3 API; set storage_endpoint_url for S3-compatible providers)
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""
    aws_region: str = "ap-south-1"
    storage_bucket_name: str = ""
    storage_endpoint_url: str = ""
    storage_signed_url_expiration: int = 3600
    storage_max_retries: int = 3
    storage_upload_backoff: float = 0.5
    storage_read_backoff: float = 0.3

    # PDF rendering
    pdf_max_retries: int = 3
    pdf_retry_backoff: float = 0.5
    pdf_target_width: int = 2000
    pdf_max_scale: float = 4.0
    max_upload_bytes: int = 10 * 1024 * 1024

    # Trial
    default_max_trial_uses: int = 3

    # Razorpay payment gateway
    razorpay_key_id: str = ""
    razorpay_key_secret: str = ""
    razorpay_webhook_secret: str = ""

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()


def get_cors_origins() -> list[str]:
    """CORS origins from the comma-separated setting."""
    origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    return origins or ["*"]


# --- Constants (non-env, business config) ---

FREE_TIER: str = "free"

# Payment: plan_id -> amount in paise (1 INR = 100 paise)
PLAN_AMOUNTS: dict[str, int] = {
    "daily": 9900,   # ₹99
    "weekly": 39900,  # ₹399
    "monthly": 99900, # ₹999
}
PAYMENT_CURRENCY: str = "INR"

# Storage layout
STORAGE_USERS_PREFIX: str = "users"
STORAGE_PUBLIC_PREFIX: str = "public"
STORAGE_LIST_LIMIT: int = 1000

# Resume upload
RESUME_FOLDER: str = "resumes"
RESUME_IMAGE_FOLDER: str = "previews"
RESUME_KV_PREFIX: str = "resume:"
ALLOWED_RESUME_EXTENSIONS = {".pdf"}

# PDF generator (seed sample resumes)
PDF_DEFAULT_TITLE: str = "Resume"
PDF_LINE_HEIGHT: int = 14
PDF_FONT_SIZE_TITLE: int = 14
PDF_FONT_SIZE_BODY: int = 10
PDF_MAX_LINE_CHARS: int = 120
