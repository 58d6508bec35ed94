"""
Application configuration settings.
Handles environment variables and application-wide settings.
"""
from typing import List, Optional
from urllib.parse import quote_plus

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file
load_dotenv()


DEFAULT_CORS_ORIGINS = ",".join([
    "https://ciseco-3a2e8.web.app",
    "http://localhost:5173",
    "http://localhost:5174",
    "http://localhost:5175",
])


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application settings
    app_name: str = Field(default="Quick Bazaar Server")
    app_version: str = Field(default="1.0.0")

    # Server settings
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000)

    # Database credentials
    db_user: Optional[str] = Field(default=None)
    db_pass: Optional[str] = Field(default=None)

    # Database settings
    mongodb_url: Optional[str] = Field(default=None)
    mongodb_host: str = Field(default="cluster0.wj0pjif.mongodb.net")
    mongodb_app_name: str = Field(default="Cluster0")
    database_name: str = Field(default="QuickBazaarDB")
    connect_on_startup: bool = Field(default=True)

    # MongoDB connection settings
    server_selection_timeout_ms: int = Field(
        default=30000, validation_alias="MONGODB_SERVER_SELECTION_TIMEOUT_MS"
    )
    connect_timeout_ms: int = Field(default=30000, validation_alias="MONGODB_CONNECT_TIMEOUT_MS")

    # Logging settings
    log_level: str = Field(default="INFO")

    # CORS settings
    cors_origins: str = Field(default=DEFAULT_CORS_ORIGINS)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {sorted(valid_levels)}")
        return upper

    @property
    def cors_origins_list(self) -> List[str]:
        """Comma-separated CORS origins as a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def has_credentials(self) -> bool:
        return bool(self.db_user) and bool(self.db_pass)

    def build_mongodb_uri(self) -> str:
        """
        Build the MongoDB connection string.

        MONGODB_URL wins when set; otherwise an SRV string is assembled from
        DB_USER/DB_PASS and the cluster host.

        Raises:
            ValueError: If neither a full URL nor both credentials are configured
        """
        if self.mongodb_url:
            return self.mongodb_url
        if not self.has_credentials:
            raise ValueError("DB_USER and DB_PASS must be set when MONGODB_URL is not provided")
        return (
            f"mongodb+srv://{quote_plus(self.db_user)}:{quote_plus(self.db_pass)}"
            f"@{self.mongodb_host}/?retryWrites=true&w=majority&appName={self.mongodb_app_name}"
        )


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings."""
    return settings
