import os
import logging
from pydantic import BaseModel, Field
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()

class LeavePolicySettings(BaseModel):
    default_cl_balance: float = Field(default=float(os.getenv("DEFAULT_CL_BALANCE", "20")))
    default_sl_balance: float = Field(default=float(os.getenv("DEFAULT_SL_BALANCE", "5")))
    max_submissions: int = Field(default=int(os.getenv("MAX_SUBMISSIONS", "3")))
    # One paid full day and one paid half day per calendar month
    monthly_full_day_quota: int = 1
    monthly_half_day_quota: int = 1
    upcoming_window_days: int = Field(default=int(os.getenv("UPCOMING_LEAVE_WINDOW_DAYS", "30")))
    upcoming_limit: int = Field(default=int(os.getenv("UPCOMING_LEAVE_LIMIT", "10")))

class EmailSettings(BaseModel):
    smtp_host: Optional[str] = Field(default=os.getenv("SMTP_HOST"))
    smtp_port: int = Field(default=int(os.getenv("SMTP_PORT", "587")))
    username: str = Field(default=os.getenv("SMTP_USERNAME", ""))
    password: str = Field(default=os.getenv("SMTP_PASSWORD", ""))
    use_tls: bool = Field(default=os.getenv("SMTP_USE_TLS", "true").lower() == "true")
    from_email: Optional[str] = Field(default=os.getenv("EMAIL_FROM"))
    company_name: str = Field(default=os.getenv("COMPANY_NAME", "DYP Company"))
    timeout_seconds: float = 10.0

class Config(BaseModel):
    app_name: str = "Leave Management API"
    environment: str = os.getenv("APP_ENV", "development")
    api_prefix: str = "/api"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./leave.db")

    # Leave policy and outbound mail
    leave: LeavePolicySettings = LeavePolicySettings()
    email: EmailSettings = EmailSettings()

    version: str = "1.0.0"
    request_id_header: str = "X-Request-ID"
    # Identity header set by the upstream auth gateway
    user_id_header: str = "X-User-ID"

    # CORS: comma-separated origins loaded from env.
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            o.strip()
            for o in os.getenv(
                "CORS_ORIGINS",
                "http://localhost:3000,http://localhost:5173,"
                "http://127.0.0.1:3000,http://127.0.0.1:5173",
            ).split(",")
            if o.strip()
        ]
    )

settings = Config()

# --- Startup Validation for Production ---
_logger = logging.getLogger(__name__)
if settings.environment == "production":
    _critical_missing = []
    if not settings.email.smtp_host:
        _critical_missing.append("SMTP_HOST")
    if not settings.email.from_email:
        _critical_missing.append("EMAIL_FROM")
    if settings.database_url.startswith("sqlite"):
        _critical_missing.append("DATABASE_URL")
    if _critical_missing:
        raise RuntimeError(
            f"FATAL: The following settings must be provided in production: "
            f"{', '.join(_critical_missing)}. Set them as environment variables."
        )
elif not settings.email.smtp_host:
    _logger.warning("SMTP_HOST is not set; leave notifications will not be delivered.")
