import os

from dotenv import load_dotenv


load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]

APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./acadpilot.db")

CORS_ORIGINS = _get_list(os.getenv("CORS_ORIGINS", "http://localhost:8787"))

SESSION_COOKIE_NAME = "session_id"
SESSION_TTL_DAYS = int(os.getenv("SESSION_TTL_DAYS", "7"))
SESSION_COOKIE_SECURE = _get_bool(os.getenv("SESSION_COOKIE_SECURE"), default=True)

REQUIRE_EMAIL_VERIFICATION = _get_bool(os.getenv("REQUIRE_EMAIL_VERIFICATION"), default=True)
VERIFICATION_CODE_TTL_MINUTES = int(os.getenv("VERIFICATION_CODE_TTL_MINUTES", "10"))
VERIFIED_EMAIL_TTL_MINUTES = int(os.getenv("VERIFIED_EMAIL_TTL_MINUTES", "30"))
VERIFICATION_RESEND_COOLDOWN_SECONDS = int(os.getenv("VERIFICATION_RESEND_COOLDOWN_SECONDS", "60"))

# "log" writes codes to the application log, "smtp" delivers them.
MAIL_BACKEND = os.getenv("MAIL_BACKEND", "log").strip().lower()
MAIL_FROM = os.getenv("MAIL_FROM", "Acad Co-Pilot <no-reply@localhost>")
SMTP_HOST = os.getenv("SMTP_HOST", "localhost")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USERNAME = os.getenv("SMTP_USERNAME", "")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")
SMTP_USE_TLS = _get_bool(os.getenv("SMTP_USE_TLS"), default=True)
SMTP_TIMEOUT_SECONDS = float(os.getenv("SMTP_TIMEOUT_SECONDS", "10"))

def validate_runtime_config() -> None:
    if APP_ENV.lower() != "production":
        return
    if not SESSION_COOKIE_SECURE:
        raise RuntimeError("SESSION_COOKIE_SECURE must be enabled in production.")
    if REQUIRE_EMAIL_VERIFICATION and MAIL_BACKEND != "smtp":
        raise RuntimeError("MAIL_BACKEND must be 'smtp' in production when email verification is required.")
