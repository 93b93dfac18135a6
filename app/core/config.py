"""Configuration management for the Signal API."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file (only if accessible)
try:
    load_dotenv()
except (PermissionError, OSError):
    # In sandboxed environments, .env might not be accessible
    # Environment variables should be set directly
    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Supabase configuration (required)
    SUPABASE_URL: str = Field(..., description="Supabase project URL")
    SUPABASE_SERVICE_ROLE_KEY: str = Field(..., description="Supabase service role key")

    # Model providers
    ANTHROPIC_API_KEY: str = Field(default="", description="Anthropic API key for enrichment")
    OPENAI_API_KEY: str = Field(default="", description="OpenAI API key for transcription")

    # Environment
    SIGNAL_ENV: str = Field(default="dev", description="Environment: dev, staging, prod")

    # Enrichment models
    ENRICHMENT_MODEL: str = Field(
        default="claude-sonnet-4-20250514", description="Model for all enrichment operations"
    )
    RESEARCH_MODEL: str = Field(
        default="claude-sonnet-4-20250514", description="Model for web-search augmentation"
    )
    TRANSCRIPTION_MODEL: str = Field(default="whisper-1", description="Speech-to-text model")

    # Timeouts (seconds)
    ENRICH_TIMEOUT_SECONDS: float = Field(
        default=120.0, description="Wall-clock bound for standard enrichment calls"
    )
    HEAVY_ENRICH_TIMEOUT_SECONDS: float = Field(
        default=180.0, description="Wall-clock bound for journey maps, synthesis and suggestions"
    )
    TRANSCRIBE_TIMEOUT_SECONDS: float = Field(
        default=300.0, description="Wall-clock bound for audio transcription"
    )

    # Web-search augmentation (hypothesis suggestions only)
    RESEARCH_MAX_ITERATIONS: int = Field(
        default=4, description="Max model turns in the web-search tool loop"
    )
    RESEARCH_MAX_SEARCHES: int = Field(
        default=5, description="Max web searches the model may issue per request"
    )
    RESEARCH_TIMEOUT_SECONDS: float = Field(
        default=90.0, description="Wall-clock bound for the whole research path"
    )

    # Upload limits
    MAX_AUDIO_BYTES: int = Field(
        default=25_000_000, description="Max decoded audio size accepted for transcription"
    )
    MAX_TRANSCRIPT_CHARS: int = Field(
        default=60_000, description="Max transcript characters sent to the model"
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance

    Raises:
        ValidationError: If required environment variables are missing
    """
    return Settings()
