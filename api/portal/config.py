import os

# Environment-driven settings; read once at import.

def _flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")

ENV = os.environ.get("ENV", "prod")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./dev.db")

JWT_SECRET = os.environ.get("JWT_SECRET", "dev-secret")
JWT_ALG = os.environ.get("JWT_ALG", "HS256")
ACCESS_EXPIRE_MIN = int(os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
# confirmation + recovery links
ACTION_EXPIRE_MIN = int(os.environ.get("ACTION_TOKEN_EXPIRE_MINUTES", "60"))
REQUIRE_EMAIL_CONFIRMATION = _flag("AUTH_REQUIRE_EMAIL_CONFIRMATION", "true")

SESSION_COOKIE_NAME = os.environ.get("SESSION_COOKIE_NAME", "portal-access-token")
SESSION_COOKIE_SECURE = _flag("SESSION_COOKIE_SECURE", "false")

SITE_URL = os.environ.get("SITE_URL", "http://localhost:8000").rstrip("/")

STORAGE_BASE_DIR = os.environ.get("STORAGE_BASE_DIR", "./storage")
STORAGE_BUCKET = os.environ.get("STORAGE_BUCKET", "uploads")
SUBMISSION_MAX_MB = int(os.environ.get("SUBMISSION_MAX_MB", "20"))

RESEND_API_KEY = os.environ.get("RESEND_API_KEY", "")
RESEND_API_URL = os.environ.get("RESEND_API_URL", "https://api.resend.com/emails")
MAIL_FROM = os.environ.get("MAIL_FROM", "onboarding@resend.dev")
MAIL_TIMEOUT_SECONDS = float(os.environ.get("MAIL_TIMEOUT_SECONDS", "10"))
