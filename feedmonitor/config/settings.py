"""Application settings with environment variable support."""

from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL
from typing import Optional
from pathlib import Path


# Compute base_dir at module level
_BASE_DIR = Path(__file__).parent.parent.parent.resolve()

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_8_5) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/31.0.1650.63 Safari/537.36"
)


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="FM_",  # FM_DATABASE_URL, FM_POLL_RATE_SECONDS, etc.
    )

    # Paths
    base_dir: Path = _BASE_DIR
    feeds_path: Path = _BASE_DIR / "config" / "feeds.json"

    # Database - either a full URL or discrete fields
    database_url: Optional[str] = None
    db_driver: str = "postgresql"
    db_user: Optional[str] = None
    db_password: Optional[str] = None
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "feeds"
    create_schema: bool = True

    # Scheduling
    poll_rate_seconds: float = 15.0
    staleness_threshold_seconds: float = 15.0

    # Fetching
    fetch_timeout_seconds: int = 30
    fetch_max_attempts: int = 1  # 1 = wait for the next scan
    fetch_backoff_min_seconds: float = 1.0
    fetch_backoff_max_seconds: float = 10.0
    fetch_chunk_size: int = 8192
    user_agent: str = DEFAULT_USER_AGENT

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    def resolved_database_url(self) -> str:
        """Return database_url, or compose one from the discrete db_* fields."""
        if self.database_url:
            return self.database_url

        url = URL.create(
            drivername=self.db_driver,
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )
        return url.render_as_string(hide_password=False)


settings = Settings()
