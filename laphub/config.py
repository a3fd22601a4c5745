import os
from dataclasses import dataclass, field

from dotenv import load_dotenv


def _env_bool(name: str, default: bool = False) -> bool:
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_list(name: str, default: str) -> tuple[str, ...]:
    raw_value = os.getenv(name, default)
    return tuple(item.strip() for item in raw_value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///./laphub.db"
    session_secret: str = "fallback_session_secret"
    session_max_age_seconds: int = 60 * 60 * 24 * 7
    session_https_only: bool = False
    otp_ttl_seconds: int = 60
    otp_retention_seconds: int = 86400
    otp_debug: bool = False
    otp_email_sender: str = ""
    otp_email_subject: str = "Your verification code"
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    cors_origins: tuple[str, ...] = field(default_factory=lambda: ("*",))
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv(override=True)
        smtp_username = os.getenv("EMAIL_USER", "")
        return cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            session_secret=os.getenv("SESSION_SECRET", cls.session_secret),
            session_max_age_seconds=int(
                os.getenv("SESSION_MAX_AGE_SECONDS", str(cls.session_max_age_seconds))
            ),
            session_https_only=_env_bool("SESSION_HTTPS_ONLY", False),
            otp_ttl_seconds=int(os.getenv("OTP_TTL_SECONDS", "60")),
            otp_retention_seconds=int(os.getenv("OTP_RETENTION_SECONDS", "86400")),
            otp_debug=_env_bool("OTP_DEBUG", False),
            otp_email_sender=os.getenv("OTP_EMAIL_SENDER") or smtp_username,
            otp_email_subject=os.getenv("OTP_EMAIL_SUBJECT", cls.otp_email_subject),
            smtp_host=os.getenv("SMTP_HOST", ""),
            smtp_port=int(os.getenv("SMTP_PORT", "587")),
            smtp_username=smtp_username,
            smtp_password=os.getenv("EMAIL_PASS", ""),
            cors_origins=_env_list("CORS_ORIGINS", "*"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
