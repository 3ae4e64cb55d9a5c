"""Configuration management for Sathi Seva."""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Tag suggestion (Gemini)
    gemini_api_key: Optional[str] = Field(None, description="Gemini API key for tag suggestion")
    gemini_model: str = Field("gemini-1.5-flash-latest", description="Gemini model used for tag suggestion")
    gemini_api_url: str = Field(
        "https://generativelanguage.googleapis.com/v1beta/models",
        description="Gemini REST endpoint base"
    )
    tag_request_timeout: float = Field(15.0, description="Tag suggestion request timeout in seconds")

    # Geocoding (Nominatim)
    nominatim_url: str = Field("https://nominatim.openstreetmap.org", description="Nominatim server URL")
    nominatim_user_agent: str = Field("SathiSevaConnect/1.0", description="User-Agent sent to Nominatim")
    geocoding_timeout: float = Field(10.0, description="Geocoding request timeout in seconds")
    locality_radius_km: float = Field(5.0, description="Radius treated as the same locality")

    # Application Configuration
    debug: bool = Field(False, description="Enable debug mode")
    log_level: str = Field("INFO", description="Logging level")

    # Server Configuration
    host: str = Field("0.0.0.0", description="Server host")
    port: int = Field(8000, description="Server port")
    reload: bool = Field(False, description="Enable auto-reload")
    allowed_origins: list[str] = Field(["*"], description="CORS allowed origins")
    user_id_header: str = Field("X-User-Id", description="Header carrying the authenticated user id")


# Global settings instance
settings = Settings()
