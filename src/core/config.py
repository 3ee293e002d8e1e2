"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Biolink API")
    app_version: str = Field(default="1.0.0")
    app_env: str = Field(default="development")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)
    public_base_url: str = Field(
        default="http://localhost:5173",
        description="Origin used when building shareable profile URLs",
    )

    # Database
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/biolink",
        description="PostgreSQL connection URL with asyncpg driver",
    )

    # JWT Authentication (tokens are issued by the account service)
    jwt_secret_key: str = Field(
        default="CHANGE-ME-IN-PRODUCTION",
        description="Shared secret for HS256 token validation",
    )
    jwt_algorithm: str = Field(default="HS256")
    jwt_expire_minutes: int = Field(default=30)

    # Identity provider (Discord)
    discord_bot_token: str = Field(
        default="",
        description="Bot token used to look up Discord users (server-side only)",
    )
    discord_api_base_url: str = Field(default="https://discord.com/api/v10")
    identity_timeout_seconds: float = Field(default=10.0)

    # Uploads
    upload_dir: str = Field(default="uploads")
    upload_url_prefix: str = Field(default="/uploads")
    avatar_max_bytes: int = Field(default=5 * 1024 * 1024)
    background_max_bytes: int = Field(default=50 * 1024 * 1024)

    # Profile rules
    social_links_strict: bool = Field(
        default=False,
        description="Reject unknown social platforms instead of dropping them",
    )
    slug_lookup_falls_back_to_owner_id: bool = Field(
        default=False,
        description="Resolve an unknown slug as an owner id (legacy share links)",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def async_database_url(self) -> str:
        """Ensure the database URL uses the asyncpg driver scheme.

        Hosting providers supply a standard ``postgresql://`` URL.
        SQLAlchemy's async engine requires ``postgresql+asyncpg://``.
        """
        url = self.database_url
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

    # Rate Limiting
    rate_limit_enabled: bool = Field(
        default=True,
        description="Enable/disable rate limiting (disable for tests)",
    )

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Comma-separated list of allowed origins",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
