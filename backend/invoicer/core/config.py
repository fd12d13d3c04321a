from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "invoicer"
    DEBUG: bool = False
    APP_DATABASE_DSN: str = "sqlite:////tmp/invoicer.db"
    REDIS_URL: str = "redis://localhost:6379"

    # Currency used when a plan does not carry one
    DEFAULT_CURRENCY: str = "USD"

    # Hour (UTC) at which the daily billing run is scheduled
    BILLING_CRON_HOUR: int = 0


settings = Settings()
