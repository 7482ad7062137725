"""Application configuration."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings are loaded in this priority order (highest to lowest):
    1. Environment variables
    2. .env file (for local development)
    3. Default values

    For local development, copy .env.example to .env and fill in your values.
    For production, set environment variables directly.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Application
    # =========================================================================
    app_name: str = "Claim Chain API"
    debug: bool = False

    # =========================================================================
    # Storage
    # =========================================================================
    storage_backend: Literal["sql", "dynamodb"] = Field(
        default="sql",
        description="Key-value backing for claim records",
    )

    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/claims",
        description="PostgreSQL connection URL (storage_backend=sql)",
    )

    # DynamoDB (storage_backend=dynamodb)
    claims_table: str = Field(
        default="timesheetstrings",
        description="DynamoDB table keyed by (companyId, timesheetId)",
    )
    dynamodb_region: str = "us-east-1"
    dynamodb_endpoint_url: str | None = Field(
        default=None,
        description="Override endpoint, e.g. http://localhost:8000 for DynamoDB Local",
    )

    # =========================================================================
    # CORS
    # =========================================================================
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = True

    # =========================================================================
    # API Settings
    # =========================================================================
    api_v1_prefix: str = "/api/v1"


settings = Settings()
