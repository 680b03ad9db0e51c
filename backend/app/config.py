"""
Product API — Application Configuration
=========================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
       Fails fast if the database credentials are missing.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time; validated before the app serves traffic.

Connection string:
    The database URL is never written in source. It is composed from
    DB_NAME and DB_PASSWORD (both required) plus the cluster host and
    database name, using DATABASE_URL_TEMPLATE:

        postgresql+asyncpg://{user}:{password}@{host}/{database}
"""

from typing import List
from urllib.parse import quote_plus

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.exceptions import ConfigurationError


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Everything except the two credentials has a development default.
    Attributes are grouped by concern for readability.
    """

    # ── Database ──────────────────────────────────────────────────────────
    # What: Account name and password for the managed database cluster
    # Required: YES. Empty values abort startup (see validate_required)
    db_name: str = Field(default="", description="Database account name")
    db_password: str = Field(default="", description="Database account password")

    # What: Where the cluster lives and which database to use on it
    db_host: str = Field(default="localhost:5432")
    db_database: str = Field(default="products")

    # What: Template the connection URL is rendered from
    # Placeholders: {user}, {password}, {host}, {database}
    # Unused placeholders are allowed (e.g. sqlite URLs in tests)
    database_url_template: str = Field(
        default="postgresql+asyncpg://{user}:{password}@{host}/{database}",
        description="Async SQLAlchemy URL template",
    )

    # ── Deployment ────────────────────────────────────────────────────────
    # What: "production" exports the ASGI app for an external host instead
    # of binding a port from run()
    environment: str = Field(default="development")

    # What: Optional directory of static files served at "/" (index.html as index)
    public_dir: str = Field(default="")

    # ── CORS ──────────────────────────────────────────────────────────────
    cors_origins: str = Field(default="http://localhost:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=3000, ge=1, le=65535)

    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("environment")
    @classmethod
    def normalize_environment(cls, v: str) -> str:
        return v.strip().lower()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def database_url(self) -> str:
        """
        What:  Connection URL rendered from the template and the credentials.
        Why quote_plus: Passwords may contain '@', ':' or '/' which would
               otherwise break URL parsing.
        """
        return self.database_url_template.format(
            user=quote_plus(self.db_name),
            password=quote_plus(self.db_password),
            host=self.db_host,
            database=self.db_database,
        )

    def validate_required(self) -> None:
        """
        What:  Validates that the database credentials are configured.
        When:  Called during app startup (lifespan) and by run() before binding.
        Raises: ConfigurationError listing every missing variable.
        """
        missing = []
        if not self.db_name:
            missing.append("DB_NAME")
        if not self.db_password:
            missing.append("DB_PASSWORD")
        if missing:
            raise ConfigurationError(
                message=(
                    "Database credentials not found in environment variables: "
                    + ", ".join(missing)
                ),
                context={"missing": missing},
            )


# Singleton instance imported throughout the application
settings = Settings()
