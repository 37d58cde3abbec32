"""
Configuration management for the ReconShop cart engine
"""


import threading
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Storage configuration
    storage_backend: Literal["memory", "file", "database"] = Field(
        default="file", description="Key/value store used to persist the cart"
    )
    storage_key: str = Field(
        default="reconshop-cart", min_length=1, description="Key the cart is saved under"
    )
    storage_dir: str = Field(
        default="data/storage", description="Directory for the file store"
    )
    database_url: str = Field(
        default="sqlite:///data/reconshop_cart.db",
        description="Database connection URL for the database store",
    )

    # Cart rules
    max_line_quantity: Optional[int] = Field(
        default=99, gt=0, description="Upper bound for a single line's quantity"
    )
    currency: str = Field(default="USD", description="Currency code")

    # Application settings
    log_level: str = Field(default="INFO", description="Logging level")
    log_dir: str = Field(default="logs", description="Directory for log files")
    environment: str = Field(
        default="development", description="Application environment"
    )

    @field_validator("currency")
    @classmethod
    def _check_currency(cls, value: str) -> str:
        if len(value) != 3 or not value.isalpha():
            raise ValueError("Currency must be a 3-letter code")
        return value.upper()

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        value = value.upper()
        if value not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return value


_settings_instance: Settings | None = None
_settings_lock = threading.Lock()


def get_config() -> Settings:
    """Get the global settings instance, ensuring thread safety."""
    global _settings_instance
    if _settings_instance is None:
        with _settings_lock:
            if _settings_instance is None:
                _settings_instance = Settings()
    return _settings_instance
