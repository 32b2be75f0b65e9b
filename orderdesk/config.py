from pydantic_settings import BaseSettings, SettingsConfigDict
class Settings(BaseSettings):
    APP_ENV: str = "dev"
    DB_URL: str = "sqlite+aiosqlite:///./orderdesk.db"
    ARCHIVE_DELAY_SECONDS: float = 60.0
    RECOVER_ARCHIVAL_ON_STARTUP: bool = True
    LOG_LEVEL: str = "INFO"
    LOG_SQL: bool = False
    WS_SEND_TIMEOUT_SECONDS: float = 5.0
    CORS_ORIGINS: list[str] = ["*"]
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
settings = Settings()
