from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    """
    Runtime configuration, read from the environment or a local .env file.
    """
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Valkey / Redis connection
    VALKEY_HOST: str = "localhost"
    VALKEY_PORT: int = 6379
    VALKEY_PASSWORD: Optional[str] = None
    VALKEY_DB: int = 0
    # Full URL (redis://...), takes precedence over host/port when set
    VALKEY_URL: Optional[str] = None

    # Track storage layout
    TRACK_KEY_PREFIX: str = "track:"
    SCAN_BATCH_SIZE: int = 100

    # HTTP API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    LOG_LEVEL: str = "INFO"

settings = Settings()
