"""
Configuration settings for the wktview application.
"""

from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Attributes:
        crs_authority_url: Base URL of the remote EPSG definition service
        crs_fetch_format: Definition format requested from the authority
        crs_fetch_timeout: Timeout in seconds for a remote CRS lookup
        default_epsg: CRS applied when the input names none
        max_input_length: Longest raw geometry string accepted by the API
        log_file: Path of the rotating log file (JSON lines outside development)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="WKTVIEW_",
    )

    # CRS resolution
    crs_authority_url: str = "https://epsg.io"
    crs_fetch_format: Literal["proj4", "wkt"] = "proj4"
    crs_fetch_timeout: float = 5.0
    default_epsg: int = 4326

    # Input limits
    max_input_length: int = 4000

    # API settings
    api_v1_prefix: str = "/api/v1"
    port: int = 8000

    # CORS settings
    cors_origins: str = "http://localhost:5173,http://localhost:3000,http://localhost:4173"

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]


# Global settings instance
settings = Settings()
