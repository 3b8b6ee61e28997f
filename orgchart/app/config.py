"""
Org Chart Service Configuration
Centralized settings using Pydantic Settings with environment variable support.

ENVIRONMENT VARIABLES REFERENCE
===============================

All settings can be configured via environment variables (uppercase, underscore-separated).
Example: `log_level` -> `LOG_LEVEL`

APPLICATION SETTINGS:
--------------------
APP_NAME                - Service name reported in logs (default: "orgchart-service")
APP_VERSION             - Service version reported in logs (default: "1.0.0")
ENVIRONMENT             - Runtime environment: development|staging|production (default: "development")
LOG_LEVEL               - Logging level: DEBUG|INFO|WARNING|ERROR|CRITICAL (default: "INFO")
LOG_FORMAT              - json|text (default: "json")
ENABLE_API_DOCS         - Enable /docs and /redoc endpoints (default: true)

NODE STORE:
-----------
NODE_STORE_BACKEND      - memory|sqlite (default: "memory")
SQLITE_PATH             - SQLite database file when backend is sqlite (default: "./data/orgchart.db")

SUGGESTIONS:
------------
SUGGESTION_LIMIT             - Max member suggestions returned (default: 5)
SUGGESTION_MIN_QUERY_LENGTH  - Minimum query length before suggesting (default: 2)

NODE DEFAULTS:
--------------
DEFAULT_NODE_COLOR      - blue|green|purple|orange|red|gray (default: "blue")
DEFAULT_NODE_SHAPE      - rectangle|circle|rounded|diamond (default: "rectangle")
"""

from functools import lru_cache
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

NODE_COLORS = ("blue", "green", "purple", "orange", "red", "gray")
NODE_SHAPES = ("rectangle", "circle", "rounded", "diamond")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """
    Application-wide settings loaded from environment variables.
    Supports .env file loading in development.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # ============================================
    # Application
    # ============================================
    app_name: str = Field(default="orgchart-service", description="Service name for logs")
    app_version: str = Field(default="1.0.0", description="Service version for logs")
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Runtime environment"
    )
    log_level: str = Field(default="INFO", description="Root logging level")
    log_format: str = Field(default="json", pattern="^(json|text)$", description="Log output format")
    enable_api_docs: bool = Field(default=True, description="Expose /docs and /redoc")

    # ============================================
    # Node Store
    # ============================================
    node_store_backend: str = Field(
        default="memory",
        pattern="^(memory|sqlite)$",
        description="Backing store for hierarchy nodes"
    )
    sqlite_path: str = Field(default="./data/orgchart.db", description="SQLite database file")

    # ============================================
    # Suggestions
    # ============================================
    suggestion_limit: int = Field(default=5, ge=1, le=50, description="Max member suggestions")
    suggestion_min_query_length: int = Field(
        default=2, ge=1, le=10, description="Minimum query length before suggesting"
    )

    # ============================================
    # Node Defaults
    # ============================================
    default_node_color: str = Field(default="blue", description="Color for new nodes")
    default_node_shape: str = Field(default="rectangle", description="Shape for new nodes")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate log level."""
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {LOG_LEVELS}")
        return level

    @field_validator("default_node_color")
    @classmethod
    def validate_node_color(cls, v: str) -> str:
        """Validate default node color."""
        if v not in NODE_COLORS:
            raise ValueError(f"default_node_color must be one of {NODE_COLORS}")
        return v

    @field_validator("default_node_shape")
    @classmethod
    def validate_node_shape(cls, v: str) -> str:
        """Validate default node shape."""
        if v not in NODE_SHAPES:
            raise ValueError(f"default_node_shape must be one of {NODE_SHAPES}")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
