"""
Runtime settings for the scholarship backend.

Read from environment variables or a .env file via pydantic-settings.
Supabase credentials are required; everything else has a default.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """
    Scholarship backend settings.

    Env names are the upper-cased field names, e.g. IMPORT_MAX_WORKERS.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # ===================
    # STORAGE
    # ===================
    supabase_url: str = Field(
        ...,
        description="Supabase project URL"
    )
    supabase_key: str = Field(
        ...,
        description="Supabase anon key"
    )
    supabase_service_key: Optional[str] = Field(
        None,
        description="Service role key; used instead of the anon key when set"
    )
    applications_table: str = Field(
        default="scholarship_application",
        min_length=1,
        description="Table holding scholarship application records"
    )

    # ===================
    # IMPORT
    # ===================
    import_max_workers: Optional[int] = Field(
        default=None,
        ge=1,
        le=256,
        description="Cap on rows submitted at once; unset runs every row together"
    )

    # ===================
    # SERVER
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$"
    )
    debug: bool = Field(
        default=True,
        description="Expose /docs and error details"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$"
    )
    api_host: str = "0.0.0.0"
    api_port: int = Field(default=8000, ge=1000, le=65535)

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v):
        return v.upper() if isinstance(v, str) else v

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Load settings once per process.

    Tests that change the environment call get_settings.cache_clear().

    Raises:
        ValidationError: Missing Supabase credentials or a bad value
    """
    return Settings()


settings = get_settings()
