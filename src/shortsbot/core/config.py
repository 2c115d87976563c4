"""
Application configuration using Pydantic Settings.

This module loads configuration from environment variables and .env files,
providing type-safe access to all application settings. Every external
integration is optional: a missing key switches the matching pipeline stage
to its fallback behavior instead of failing startup.
"""

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    Settings are loaded from .env file if present.

    Attributes:
        environment: The deployment environment (development, staging, production)
        debug: Enable debug mode with verbose logging
        youtube_api_key: YouTube Data API key used for trend search
        youtube_client_id: OAuth client id for the publishing account
        youtube_client_secret: OAuth client secret for the publishing account
        youtube_redirect_uri: OAuth redirect target registered with Google
        openai_api_key: OpenAI API key for scene image generation
        elevenlabs_api_key: ElevenLabs API key for narration
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False

    # Application
    app_name: str = "ShortsBot API"
    api_v1_prefix: str = "/api/v1"
    frontend_origin: str = "http://localhost:5173"

    # YouTube search
    youtube_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("youtube_api_key", "google_api_key"),
        description="YouTube Data API v3 key for trend search",
    )

    # YouTube publishing account (OAuth)
    youtube_client_id: str | None = None
    youtube_client_secret: str | None = None
    youtube_redirect_uri: str = "http://localhost:4000/api/v1/shorts/youtube/callback"
    youtube_privacy_status: Literal["private", "unlisted", "public"] = "private"

    # Media providers (optional)
    openai_api_key: str | None = None
    openai_image_model: str = "dall-e-3"
    elevenlabs_api_key: str | None = None
    elevenlabs_voice_id: str = "21m00Tcm4TlvDq8ikWAM"  # Rachel
    tts_language: str = "ko"

    # Network timeouts (seconds)
    search_timeout_seconds: float = 12.0
    image_timeout_seconds: float = 60.0
    tts_timeout_seconds: float = 15.0
    oauth_timeout_seconds: float = 15.0
    upload_timeout_seconds: float = 300.0

    # Pipeline output
    video_output_dir: str | None = Field(
        default=None,
        description="Directory for assembled videos (defaults to the system temp dir)",
    )

    # CORS
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:4000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    @computed_field
    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @computed_field
    @property
    def youtube_oauth_configured(self) -> bool:
        """Check whether both OAuth client credentials are present."""
        return bool(
            (self.youtube_client_id or "").strip()
            and (self.youtube_client_secret or "").strip()
        )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are only loaded once
    during application lifecycle.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
