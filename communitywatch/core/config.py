"""
CommunityWatch - Configuration Management
Centralized configuration using pydantic-settings.
"""

from functools import lru_cache
from typing import Optional, Tuple

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_env: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # Firebase
    firebase_credentials_path: Optional[str] = None
    firebase_project_id: Optional[str] = None
    firebase_web_api_key: Optional[str] = None

    # Firestore collections
    reports_collection: str = "reports"
    users_collection: str = "users"
    feedback_collection: str = "feedback"

    # Nominatim (OpenStreetMap geocoding)
    nominatim_url: str = "https://nominatim.openstreetmap.org"
    nominatim_user_agent: str = "CommunityWatch/1.0"
    geocoding_country_codes: str = "za"
    geocoding_result_limit: int = 10
    geocoding_timeout_seconds: float = 15.0

    # Feed ranking
    ranking_time_weight: float = 0.5
    ranking_distance_weight: float = 0.5

    # Map defaults (Johannesburg)
    map_default_latitude: float = -26.2041
    map_default_longitude: float = 28.0473
    map_default_zoom: int = 13

    # API Settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def map_default_center(self) -> Tuple[float, float]:
        return (self.map_default_latitude, self.map_default_longitude)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
