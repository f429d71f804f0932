"""
Cestas Configuration Module.

Handles application settings, feature flags, and environment configuration.
Uses pydantic-settings for validation and type safety.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FeatureFlags(BaseSettings):
    """Feature flags for enabling/disabling modules."""

    model_config = SettingsConfigDict(env_prefix="FEATURE_")

    cards: bool = True
    tables: bool = True
    users: bool = True

    def to_dict(self) -> dict[str, bool]:
        """Return feature flags as dictionary for health endpoint."""
        return {
            "cards": self.cards,
            "tables": self.tables,
            "users": self.users,
        }


class SupabaseSettings(BaseSettings):
    """Supabase configuration for the remote store."""

    model_config = SettingsConfigDict(env_prefix="SUPABASE_")

    url: str = Field(default="https://demo.supabase.co", description="Supabase project URL")
    anon_key: str = Field(default="demo-anon-key", description="Supabase anonymous key")
    service_role_key: str = Field(default="", description="Supabase service role key (preferred when set)")


class CacheSettings(BaseSettings):
    """In-memory cache windows."""

    model_config = SettingsConfigDict(env_prefix="CACHE_")

    ttl_ms: int = Field(default=60_000, ge=0, description="Freshness window of the per-card table cache")
    cards_ttl_ms: int = Field(default=30_000, ge=0, description="Freshness window of the card list cache")


class RemoteSettings(BaseSettings):
    """Remote call behaviour."""

    model_config = SettingsConfigDict(env_prefix="REMOTE_")

    timeout_seconds: float = Field(default=10.0, gt=0, description="Timeout applied to every remote call")


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_env: Literal["development", "staging", "production"] = "development"
    app_debug: bool = False
    app_log_level: str = "INFO"

    # Auth
    auth_jwt_secret: str = Field(
        default="dev-only-change-me",
        validation_alias="AUTH_JWT_SECRET",
    )
    auth_jwt_algorithm: str = Field(default="HS256", validation_alias="AUTH_JWT_ALGORITHM")
    auth_access_token_ttl_seconds: int = Field(
        default=8 * 3600,
        ge=60,
        validation_alias="AUTH_ACCESS_TOKEN_TTL_SECONDS",
    )

    # Uploads (avatars and product images)
    avatar_max_bytes: int = Field(
        default=5 * 1024 * 1024,
        description="Largest accepted image upload",
        validation_alias="AVATAR_MAX_BYTES",
    )

    # Nested settings
    features: FeatureFlags = Field(default_factory=FeatureFlags)
    supabase: SupabaseSettings = Field(default_factory=SupabaseSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    remote: RemoteSettings = Field(default_factory=RemoteSettings)

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
