"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.
"""

from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database connection settings.

    Environment variables:
        USERBASE_DB_HOST: Database host (default: localhost)
        USERBASE_DB_PORT: Database port (default: 5432)
        USERBASE_DB_DATABASE: Database name (default: userbase)
        USERBASE_DB_USERNAME: Database user (default: userbase)
        USERBASE_DB_PASSWORD: Database password (required in production)
        USERBASE_DB_POOL_SIZE: Connections kept per engine (default: 10)
        USERBASE_DB_ECHO: Log every SQL statement (default: false)
    """

    model_config = SettingsConfigDict(
        env_prefix="USERBASE_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    database: str = Field(default="userbase", description="Database name")
    username: str = Field(default="userbase", description="Database username")
    password: SecretStr = Field(
        default=SecretStr(""),
        description="Database password",
    )
    pool_size: int = Field(
        default=10,
        description="Connections kept in each engine's pool",
        ge=1,
        le=100,
    )
    echo: bool = Field(default=False, description="Log SQL statements")

    @property
    def connection_string(self) -> str:
        """Generate a connection string (without password for logging)."""
        return f"postgresql://{self.username}@{self.host}:{self.port}/{self.database}"


class Settings(BaseSettings):
    """Main application settings.

    Environment variables:
        USERBASE_APP_NAME: Application name shown in the OpenAPI docs
        USERBASE_DEBUG: Debug mode (default: false)
        USERBASE_LOG_LEVEL: Minimum log level (default: info)
        USERBASE_EXPOSE_ERROR_DETAILS: Put raw exception text in 500
            response bodies (default: false)
    """

    model_config = SettingsConfigDict(
        env_prefix="USERBASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field(default="Userbase API", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(
        default="info",
        description="Minimum log level",
        pattern="^(debug|info|warning|error|critical)$",
    )
    expose_error_details: bool = Field(
        default=False,
        description="Include underlying exception messages in 500 responses",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_database_settings() -> DatabaseSettings:
    """Get cached database settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return DatabaseSettings()
