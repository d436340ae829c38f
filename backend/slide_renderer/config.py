from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = 3000  # Set via PORT env var
    log_level: str = "INFO"

    # Background download
    fetch_timeout_seconds: float = 10.0
    max_background_bytes: int = 20 * 1024 * 1024

    # Drop body lines that would run into the bottom margin
    truncate_body_overflow: bool = True

    # Assets
    font_dir: str = "assets/fonts"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
