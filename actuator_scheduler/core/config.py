from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="SCHEDULER_", extra="ignore")

    app_name: str = "Actuator Scheduler"
    timezone: str = "Europe/Paris"

    # Schedule queries without an explicit range start today and span this many days
    schedule_days: int = Field(default=7, ge=1, le=366)

    # Actuators created at startup
    actuators_file: str = Field(default="")

    # Logging
    log_level: str = "INFO"
    log_file: str = "actuator_scheduler.log"  # empty disables the file handler

    # CLI client
    api_url: str = "http://127.0.0.1:8000/api"
    http_timeout_seconds: float = 5.0


settings = Settings()
