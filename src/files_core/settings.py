# src/files_core/settings.py
import logging
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

VALID_LOG_LEVELS = ["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]


class Settings(BaseSettings):
    """
    Single source of truth for all file persistence settings.

    Configuration precedence:
    1. Environment variables (highest priority)
    2. .env file (if exists)
    3. Default values in this class (lowest priority)

    Usage:
        from files_core.settings import get_settings
        settings = get_settings()
        bucket_name = settings.s3_bucket_name
    """

    # AWS Core Settings
    aws_region: str = Field(
        default="us-east-1",
        alias="AWS_DEFAULT_REGION"
    )

    aws_access_key_id: Optional[str] = Field(
        default=None,
        alias="AWS_ACCESS_KEY_ID"
    )

    aws_secret_access_key: Optional[str] = Field(
        default=None,
        alias="AWS_SECRET_ACCESS_KEY"
    )

    aws_endpoint_url: Optional[str] = Field(
        default=None,
        alias="AWS_ENDPOINT_URL"
    )

    # S3 Configuration
    s3_bucket_name: str = Field(
        default="files-core-storage",
        description="Versioned S3 bucket holding OBJECT_STORE content"
    )

    # Embedded database
    db_path: str = Field(
        default="files.db",
        description="SQLite database holding file metadata and inline content"
    )

    # Staging
    temp_dir: Optional[str] = Field(
        default=None,
        description="Directory for staged temp files (platform default if unset)"
    )

    temp_file_retention_seconds: int = Field(
        default=600,
        ge=1,
        description="How long a staged temp file lives before it is reaped"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Normalize and validate the log level name."""
        level = str(v).upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log_level: {v}")
        return level

    @property
    def has_explicit_credentials(self) -> bool:
        """True when a key/secret pair is configured instead of the ambient chain."""
        return bool(self.aws_access_key_id and self.aws_secret_access_key)

    def get_environment_dict(self) -> dict:
        """Get configuration as a dictionary, with secrets masked.

        Returns:
            Dictionary of environment variables
        """
        return {
            'AWS_DEFAULT_REGION': self.aws_region,
            'AWS_ENDPOINT_URL': self.aws_endpoint_url or '',
            'AWS_ACCESS_KEY_ID': self.aws_access_key_id or '',
            'AWS_SECRET_ACCESS_KEY': '****' if self.aws_secret_access_key else '',
            'S3_BUCKET_NAME': self.s3_bucket_name,
            'DB_PATH': self.db_path,
            'TEMP_DIR': self.temp_dir or '',
            'TEMP_FILE_RETENTION_SECONDS': str(self.temp_file_retention_seconds),
            'LOG_LEVEL': self.log_level,
        }

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one Settings instance per process.
    """
    return Settings()


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Apply the configured log level to the root logger."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
