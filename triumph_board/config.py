"""Application configuration using Pydantic Settings."""
import logging

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Store settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TRIUMPH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # MongoDB
    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_db_name: str = "triumph_keeper"
    mongodb_transactions: bool = False  # needs a replica set
    server_selection_timeout_ms: int = 5000

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(config: Settings | None = None) -> None:
    """Configure root logging for the host process."""
    config = config or settings
    logging.basicConfig(
        level=config.log_level.upper(),
        format=config.log_format,
    )


settings = Settings()
