import logging
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # Catalog Configuration
    venues_file_path: Path = Field(
        Path("venues.json"),
        description="JSON array of venue entries, rewritten in place after a run.",
    )

    # HTTP Configuration
    fetch_timeout_seconds: float = Field(
        30.0, gt=0, description="Per-request timeout for venue page fetches."
    )
    fetch_attempts: int = Field(
        1,
        ge=1,
        le=10,
        description="Total attempts per request (1 disables retries).",
    )
    user_agent: str = Field(
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36",
        description="User-Agent header sent to every source site.",
    )

    # Scrape Behaviour
    concurrent_sources: bool = Field(
        True,
        description="Fetch the three sources of a venue concurrently instead of one after another.",
    )
    follow_match_links: bool = Field(
        True, description="Follow Cricbuzz stat links to fill in match details."
    )
    match_detail_delay_seconds: float = Field(
        1.5, ge=0, description="Pause between Cricbuzz match detail requests."
    )

    # Raw Response Dumps
    save_raw_responses: bool = Field(
        False, description="Save each adapter's raw record to raw_response_dir."
    )
    raw_response_dir: Path = Field(Path("raw_responses"))

    # Logging Configuration
    log_level: str = Field(
        "INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."
    )
    log_file: Optional[Path] = Field(
        None, description="Optional path for a rotating file log sink."
    )

    # Pydantic Settings Configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )


def load_settings() -> AppSettings:
    """Loads and validates application settings."""
    try:
        settings = AppSettings()
        log_level_upper = settings.log_level.upper()
        # Validate log_level even if loaded from .env
        if log_level_upper not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            logging.warning(
                f"Invalid LOG_LEVEL '{settings.log_level}' found in .env or default. Using INFO."
            )
            settings.log_level = "INFO"
        else:
            settings.log_level = log_level_upper
        return settings
    except Exception as e:
        logging.exception(f"Error loading application settings: {e}")
        raise SystemExit("Failed to load application settings. Exiting.")


settings: AppSettings = load_settings()
