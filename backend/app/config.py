# backend/app/config.py

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]  # repository root


class Settings(BaseSettings):
    database_url: str = "sqlite:///./data/booking.db"
    redis_url: str = "redis://localhost:6379/0"
    log_level: str = "INFO"

    # Twilio (WhatsApp + SMS). Empty → console delivery.
    twilio_account_sid: str = ""
    twilio_auth_token: str = ""
    twilio_whatsapp_from: str = ""
    twilio_sms_from: str = ""
    twilio_api_url: str = "https://api.twilio.com/2010-04-01"
    twilio_timeout: float = 10.0

    # Phones
    default_country_code: str = "963"
    phone_pattern: str = r"^(\+?963|0)?9\d{8}$"

    # Notification pipeline
    notification_queue: str = "notifications:queue"
    notification_worker_enabled: bool = True
    retry_interval_seconds: int = 300
    retry_window_hours: int = 24
    retry_limit: int = 50
    stale_pending_minutes: int = 10

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )

    @property
    def resolved_database_url(self) -> str:
        url = self.database_url
        if url.startswith("sqlite:///./"):
            # Relative sqlite path → absolute, anchored at the repository root
            relative_path = url.replace("sqlite:///./", "")
            absolute_path = BASE_DIR / relative_path
            return f"sqlite:///{absolute_path}"
        return url

    @property
    def twilio_configured(self) -> bool:
        return bool(self.twilio_account_sid and self.twilio_auth_token)


settings = Settings()
