"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # SUPABASE
    # ===================
    supabase_url: Optional[str] = Field(
        None,
        description="Supabase project URL"
    )
    supabase_key: Optional[str] = Field(
        None,
        description="Supabase anon/public key"
    )
    sheets_table: str = Field(
        default="product_sheets",
        description="Table holding one persisted sheet per product identifier"
    )

    # ===================
    # LABELS
    # ===================
    label_id_prefix: str = Field(
        default="JK",
        min_length=1,
        description="Prefix of product identifiers printed on garment labels"
    )
    default_language: str = Field(
        default="en",
        pattern="^(en|tr)$",
        description="Language used for descriptions until the client selects one"
    )
    max_upload_size_mb: int = Field(
        default=20,
        ge=1,
        le=200,
        description="Maximum size of a single uploaded file"
    )

    # ===================
    # EXTERNAL SERVICES
    # ===================
    vision_api_url: Optional[str] = Field(
        None,
        description="Image analysis endpoint returning a dominant color"
    )
    vision_api_key: Optional[str] = Field(
        None,
        description="Bearer token for the image analysis endpoint"
    )
    description_api_url: Optional[str] = Field(
        None,
        description="Text generation endpoint for product descriptions"
    )
    description_api_key: Optional[str] = Field(
        None,
        description="Bearer token for the text generation endpoint"
    )
    external_timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        le=120,
        description="Timeout for calls to external services"
    )

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def supabase_configured(self) -> bool:
        """Check if the sheet store has credentials."""
        return bool(self.supabase_url and self.supabase_key)

    @property
    def vision_configured(self) -> bool:
        return bool(self.vision_api_url)

    @property
    def description_configured(self) -> bool:
        return bool(self.description_api_url)

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
