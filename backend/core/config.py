"""
Configuration Management

Centralized configuration using Pydantic Settings.
All settings loaded from environment variables with sensible defaults.
"""
from typing import Optional, List
from pydantic_settings import BaseSettings
from pydantic import Field, ConfigDict, field_validator

# RSA moduli below this size are rejected outright
MIN_KEY_SIZE = 2048

SUPPORTED_PADDINGS = ("pkcs1v15", "pss")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Ignore extra environment variables that aren't defined in the model
    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # ============================================================
    # Database Configuration
    # ============================================================
    database_url: str = Field(
        "sqlite:///./messages.db",
        description="SQLAlchemy database URL (SQLite or PostgreSQL)"
    )
    database_pool_size: int = Field(5, description="Database connection pool size")
    database_max_overflow: int = Field(10, description="Max overflow connections")

    # ============================================================
    # API Configuration
    # ============================================================
    api_key: Optional[str] = Field(None, description="API key for authentication")
    allowed_origins: str = Field(
        "http://localhost:3000,http://localhost:8000",
        description="Comma-separated CORS allowed origins"
    )
    api_port: int = Field(8000, description="API server port")
    message_max_length: int = Field(1000, description="Maximum message length in characters")

    # ============================================================
    # Message Integrity Configuration
    # ============================================================
    integrity_key_size: int = Field(
        MIN_KEY_SIZE,
        description="RSA modulus size in bits for the process signing key (min 2048)"
    )
    integrity_padding: str = Field(
        "pkcs1v15",
        description="RSA signature padding: pkcs1v15 or pss"
    )

    # ============================================================
    # Logging Configuration
    # ============================================================
    log_level: str = Field("INFO", description="Logging level (DEBUG/INFO/WARNING/ERROR)")
    log_format: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string"
    )

    @field_validator("integrity_key_size")
    @classmethod
    def _check_key_size(cls, value: int) -> int:
        if value < MIN_KEY_SIZE:
            raise ValueError(f"integrity_key_size must be at least {MIN_KEY_SIZE} bits, got {value}")
        return value

    @field_validator("integrity_padding")
    @classmethod
    def _check_padding(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in SUPPORTED_PADDINGS:
            raise ValueError(f"integrity_padding must be one of {', '.join(SUPPORTED_PADDINGS)}")
        return value

    @property
    def allowed_origins_list(self) -> List[str]:
        """Parse allowed origins into list."""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get application settings (singleton).

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings():
    """Reload settings from environment (useful for testing)."""
    global _settings
    _settings = Settings()
    return _settings
