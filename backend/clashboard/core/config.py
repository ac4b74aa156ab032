"""Configuration settings for the Clashboard backend."""

from __future__ import annotations

import os
from typing import List, TYPE_CHECKING

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from clashboard.features.battles.retention import RetentionConfig
    from clashboard.features.sessions.clustering import SessionConfig
    from clashboard.features.tilt.engine import TiltConfig

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database Configuration
    postgres_db: str = Field(default="clashboard_db")
    postgres_user: str = Field(default="clashboard_user")
    postgres_password: str = Field(default="dev_password")
    postgres_host: str = Field(default="postgres")
    postgres_port: int = Field(default=5432)

    @property
    def database_url(self) -> str:
        """Construct async database URL from components."""
        return f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"

    # Application Configuration
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    log_json: bool = Field(
        default=True, description="JSON log lines; false renders console output"
    )

    # CORS Configuration
    cors_origins: str = Field(default="http://localhost:3000,http://127.0.0.1:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        """Get CORS origins as a list."""
        return [
            origin.strip() for origin in self.cors_origins.split(",") if origin.strip()
        ]

    @property
    def environment(self) -> str:
        """Get current environment from ENVIRONMENT variable."""
        env = os.getenv("ENVIRONMENT", "").lower()
        return env if env in ["dev", "production"] else "dev"

    # Battle analytics engine defaults
    session_max_gap_minutes: int = Field(
        default=30, ge=1, description="Maximum gap between battles of one session"
    )
    session_min_battles: int = Field(
        default=2, ge=1, description="Smallest cluster reported as a push session"
    )
    free_battle_limit: int = Field(
        default=10, ge=1, description="Battles retained for free-tier users"
    )
    pro_history_days: int = Field(
        default=60, ge=1, description="Rolling retention window for pro users"
    )
    pro_history_max_limit: int = Field(
        default=2000, ge=1, description="Upper bound for pro history queries"
    )
    tilt_recent_window: int = Field(
        default=10, ge=1, description="Battles considered for base tilt level"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Accept only standard logging level names."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(
                f"log_level must be one of {sorted(allowed)}, got {v!r}"
            )
        return v.upper()

    def session_config(self) -> "SessionConfig":
        """Build the clustering config from settings."""
        from clashboard.features.sessions.clustering import SessionConfig

        return SessionConfig(
            max_gap_minutes=self.session_max_gap_minutes,
            min_battles=self.session_min_battles,
        )

    def retention_config(self) -> "RetentionConfig":
        """Build the retention config from settings."""
        from clashboard.features.battles.retention import RetentionConfig

        return RetentionConfig(
            free_battle_limit=self.free_battle_limit,
            pro_history_max_days=self.pro_history_days,
            pro_history_default_days=self.pro_history_days,
            pro_history_max_limit=self.pro_history_max_limit,
            pro_history_default_limit=self.pro_history_max_limit,
        )

    def tilt_config(self) -> "TiltConfig":
        """Build the tilt engine config from settings."""
        from clashboard.features.tilt.engine import TiltConfig

        return TiltConfig(recent_window=self.tilt_recent_window)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix for environment variables
        extra="forbid",  # Forbid extra fields for better type safety
    )


def get_settings() -> Settings:
    """Get application settings instance."""
    return Settings()


# Create a global settings instance lazily
settings: Settings | None = None


def get_global_settings() -> Settings:
    """Get or create the global settings instance."""
    global settings
    if settings is None:
        settings = get_settings()
    return settings
