"""
Centralized configuration management using pydantic-settings.
This module provides a single source of truth for all application configuration.
"""


from dotenv import load_dotenv
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.utils.logger import setup_logger

load_dotenv(override=False)


logger = setup_logger("core_config")

DEFAULT_SECRET_KEY = "your-secret-key-change-this-in-production"


class Settings(BaseSettings):
    """
    Application settings managed by pydantic-settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        env_prefix="",
    )

    # ===== Database Configuration =====
    app_database_url: str | None = Field(
        default=None,
        alias="EXCEL_ANALYTICS_DATABASE_URL",
        description="Application database URL (postgresql+asyncpg:// or sqlite+aiosqlite://)",
    )

    database_schema: str = Field(
        default="excel_analytics",
        alias="EXCEL_ANALYTICS_SCHEMA",
        description="Database schema name (ignored for SQLite)",
    )

    # ===== Authentication Configuration =====
    secret_key: str = Field(
        default=DEFAULT_SECRET_KEY,
        alias="SECRET_KEY",
        description="Secret used to sign access tokens",
    )

    access_token_expire_minutes: int = Field(
        default=1440,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
        description="Access token lifetime in minutes (24 hours default)",
    )

    auth_header_name: str = Field(
        default="x-auth-token",
        alias="AUTH_HEADER_NAME",
        description="Request header carrying the access token",
    )

    # ===== Upload Configuration =====
    upload_dir: str = Field(
        default="uploads",
        alias="UPLOAD_DIR",
        description="Root directory for uploaded spreadsheets, one subdirectory per user",
    )

    max_upload_size_mb: int = Field(
        default=25,
        alias="MAX_UPLOAD_SIZE_MB",
        description="Largest accepted upload in megabytes",
    )

    # ===== Analysis Configuration =====
    analysis_excerpt_chars: int = Field(
        default=5000,
        alias="ANALYSIS_EXCERPT_CHARS",
        description="Number of leading characters of a file forwarded to the summarizer",
    )

    # ===== OpenAI Configuration =====
    openai_api_key: str | None = Field(
        default=None,
        alias="OPENAI_API_KEY",
        description="OpenAI API key for accessing OpenAI services",
    )

    openai_base_url: str | None = Field(
        default=None,
        alias="OPENAI_BASE_URL",
        description="OpenAI API base URL, defaults to https://api.openai.com/v1",
    )

    default_openai_model: str = Field(
        default="gpt-4o-mini",
        alias="DEFAULT_OPENAI_MODEL",
        description="Default OpenAI model to use",
    )

    # ===== Gemini Configuration =====
    gemini_api_key: str | None = Field(
        default=None, alias="GEMINI_API_KEY", description="Google Gemini API key"
    )

    default_gemini_model: str = Field(
        default="gemini-1.5-flash",
        alias="DEFAULT_GEMINI_MODEL",
        description="Default Gemini model to use",
    )

    # ===== LLM Provider Configuration =====
    default_llm_provider: str = Field(
        default="gemini",
        alias="DEFAULT_LLM_PROVIDER",
        description="LLM provider used for file summaries (gemini, openai)",
    )

    llm_summary_max_tokens: int = Field(
        default=2048,
        alias="LLM_SUMMARY_MAX_TOKENS",
        description="Maximum output tokens for a file summary",
    )

    # ===== Server Configuration =====
    server_host: str = Field(
        default="0.0.0.0", alias="SERVER_HOST", description="Server host address"
    )

    server_port: int = Field(
        default=5000, alias="SERVER_PORT", description="Server port number"
    )

    server_workers: int = Field(
        default=1, alias="SERVER_WORKERS", description="Number of uvicorn workers"
    )

    # ===== CORS Configuration =====
    cors_allow_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:5173",  # Vite dev server default port
            "http://localhost:3000",
            "http://127.0.0.1:5173",
        ],
        alias="CORS_ALLOW_ORIGINS",
        description="CORS allowed origins",
    )

    cors_allow_credentials: bool = Field(
        default=True,
        alias="CORS_ALLOW_CREDENTIALS",
        description="Whether to allow credentials in CORS requests",
    )

    cors_allow_methods: list[str] = Field(
        default_factory=lambda: ["*"],
        alias="CORS_ALLOW_METHODS",
        description="CORS allowed methods",
    )

    cors_allow_headers: list[str] = Field(
        default_factory=lambda: ["*"],
        alias="CORS_ALLOW_HEADERS",
        description="CORS allowed headers",
    )

    db_unavailable_hint: str = Field(
        default="Database connection failed. The server may be offline or network connectivity is down.",
        alias="DB_UNAVAILABLE_HINT",
        description="User-facing hint for database connection errors",
    )

    @model_validator(mode="after")
    def validate_settings(self) -> "Settings":
        """Validate settings and log warnings for missing critical configurations."""

        if self.secret_key == DEFAULT_SECRET_KEY:
            logger.warning("SECRET_KEY not set, using the insecure development default.")

        if not self.app_database_url:
            logger.warning("EXCEL_ANALYTICS_DATABASE_URL environment variable not set.")

        if self.default_llm_provider == "gemini" and not self.gemini_api_key:
            logger.warning("GEMINI_API_KEY environment variable not set.")

        if self.default_llm_provider == "openai" and not self.openai_api_key:
            logger.warning("OPENAI_API_KEY environment variable not set.")

        logger.debug(f"Upload directory: {self.upload_dir}")

        return self

    @property
    def is_sqlite(self) -> bool:
        return bool(self.app_database_url) and self.app_database_url.startswith(
            "sqlite"
        )

    @property
    def schema_name(self) -> str | None:
        # SQLite has no schemas; tables live in the main database.
        if self.is_sqlite:
            return None
        return self.database_schema


# Global settings instance
settings = Settings()
