# app/config.py
from typing import Tuple

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

MiB = 1024 * 1024


class Settings(BaseSettings):
    """Application settings, overridable with CHESTSCAN_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CHESTSCAN_", env_file=".env", extra="ignore"
    )

    app_name: str = "ChestScan X-Ray Report Generator"
    debug: bool = False
    log_level: str = "INFO"

    host: str = "0.0.0.0"
    port: int = 8000

    # drop zone
    max_upload_bytes: int = 10 * MiB
    allowed_content_types: Tuple[str, ...] = ("image/jpeg", "image/png")
    allowed_extensions: Tuple[str, ...] = (".jpeg", ".jpg", ".png")

    # mock analysis and presentation timings
    analysis_delay_seconds: float = 3.0
    scan_interval_seconds: float = 0.02
    processing_refresh_seconds: int = 1

    # in-memory session store limits
    max_sessions: int = 100
    session_ttl_seconds: float = 30 * 60


settings = Settings()
