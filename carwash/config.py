from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    database_url: str = "sqlite:///./carwash.db"

    # Shared password for the single login gate
    admin_password: str = ""
    session_secret: str = "change-me-carwash-session-secret"
    session_max_age: int = 60 * 60 * 24 * 7
    https_only: bool = False

    business_timezone: str = "Africa/Cairo"
    log_level: str = "INFO"

    seed_workers: bool = True
    default_worker_names: List[str] = ["Ahmed", "Mohamed", "Hassan", "Ali"]

    # Prefix used when turning a local phone number into a WhatsApp link
    notification_country_code: str = "20"


settings = Settings()
