"""
Unified Configuration
All environment variables and settings in one place

Credentials, fixed report destinations and pipeline tuning are read once
from the environment (or `.env`) and handed to the orchestrator as an
immutable ReportConfig.
"""
from typing import List, Optional
import logging
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator

from visitreport.services.visits.filters import FilterPolicy
from visitreport.services.reports.models import ReportConfig

logger = logging.getLogger(__name__)

DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:5173",
    "https://sitevisitportaladinathbuildwell.netlify.app",
]


class Settings(BaseSettings):
    """
    Unified application settings.
    Validates all environment variables at startup.
    """

    # ============================================================================
    # SERVER
    # ============================================================================

    environment: str = Field(default="production", description="Environment: dev/staging/production")
    port: int = Field(default=5000, description="Server port")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Root log level")
    allowed_origins: str = Field(
        default=",".join(DEFAULT_ALLOWED_ORIGINS),
        description="Comma-separated CORS origins"
    )

    # ============================================================================
    # EMAIL (SMTP)
    # ============================================================================

    gmail_user: Optional[str] = Field(default=None, description="SMTP user and From address")
    gmail_app_password: Optional[str] = Field(default=None, description="SMTP app password")
    smtp_host: str = Field(default="smtp.gmail.com", description="SMTP host (implicit TLS)")
    smtp_port: int = Field(default=465, description="SMTP port")

    # ============================================================================
    # WHATSAPP (Twilio)
    # ============================================================================

    twilio_sid: Optional[str] = Field(default=None, description="Twilio account SID")
    twilio_auth_token: Optional[str] = Field(default=None, description="Twilio auth token")
    twilio_whatsapp_from: Optional[str] = Field(default=None, description="Sender identity, e.g. whatsapp:+14155238886")
    twilio_api_base: str = Field(default="https://api.twilio.com", description="Twilio REST base URL")

    # ============================================================================
    # DOCUMENT STORE (Supabase)
    # ============================================================================

    supabase_url: Optional[str] = Field(default=None, description="Supabase project URL")
    supabase_key: Optional[str] = Field(default=None, description="Supabase service or anon key")
    visits_table: str = Field(default="siteVisits", description="Collection holding visit documents")

    # ============================================================================
    # DAILY REPORT
    # ============================================================================

    report_email: Optional[str] = Field(default=None, description="Fixed recipient for the scheduled email")
    report_whatsapp_number: Optional[str] = Field(default=None, description="Fixed recipient for the scheduled WhatsApp report")
    report_enabled: bool = Field(default=True, description="Schedule the daily report job")
    report_cron: str = Field(default="53 14 * * *", description="Crontab expression for the daily report")
    report_timezone: str = Field(default="Asia/Kolkata", description="Timezone for the schedule and displayed dates")

    filter_policy: FilterPolicy = Field(default=FilterPolicy.RECENT, description="none | recent")
    recency_window_hours: int = Field(default=24, description="Recency window size (hours)")
    chat_max_length: int = Field(default=1500, description="Max characters per WhatsApp message")
    chat_pacing_seconds: float = Field(default=2.0, description="Delay between chunked WhatsApp sends")
    send_rate_limit: str = Field(default="10/minute", description="Rate limit for POST /send-report")

    # ============================================================================
    # PRODUCTION INFRASTRUCTURE
    # ============================================================================

    sentry_dsn: Optional[str] = Field(default=None, description="Sentry DSN for error tracking")

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    @field_validator("recency_window_hours", "chat_max_length")
    @classmethod
    def must_be_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    def report_config(self) -> ReportConfig:
        """Build the immutable config handed to the orchestrator."""
        return ReportConfig(
            sender_email=self.gmail_user,
            report_email=self.report_email,
            report_whatsapp_number=self.report_whatsapp_number,
            timezone=self.report_timezone,
            filter_policy=self.filter_policy,
            recency_window_hours=self.recency_window_hours,
            chat_max_length=self.chat_max_length,
            chat_pacing_seconds=self.chat_pacing_seconds,
        )


# Global settings instance
settings = Settings()
