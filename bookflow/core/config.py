from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    BUSINESS_TIMEZONE: str = "Europe/Istanbul"

    BUSINESS_API_BASE_URL: str | None = None
    BUSINESS_API_TOKEN: str | None = None
    BUSINESS_API_TIMEOUT_SECONDS: float = 10.0

    DEFAULT_MAX_ADVANCE_BOOKING_DAYS: int = 30
    DEFAULT_MIN_NOTIFICATION_HOURS: int = 0
    CUSTOMER_NOTES_MAX_LENGTH: int = 500

    # Opt-in: show an unrestricted calendar when the schedule is malformed.
    SCHEDULE_FALLBACK_ENABLED: bool = False


settings = Settings()
