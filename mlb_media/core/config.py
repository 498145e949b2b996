"""
Configuration management for the MLB media import service.
"""
import os
from typing import Optional


VERSION = "1.0.0"


class Settings:
    """Application settings with environment variable support."""

    # Upstream endpoints
    mlb_api_base_url: str = os.getenv("MLB_API_BASE_URL", "https://www.mlb.com/data-service/en/videos/")
    mlb_cdn_base_url: str = os.getenv("MLB_CDN_BASE_URL", "https://img.mlbstatic.com/mlb-images/image/upload/mlb/")

    # Request timeout for the metadata endpoint (in seconds)
    api_timeout: float = float(os.getenv("MLB_API_TIMEOUT", "15"))

    # Cache TTL (in seconds)
    cache_duration: int = int(os.getenv("MLB_CACHE_DURATION", "3600"))  # 1 hour
    cache_key_prefix: str = os.getenv("CACHE_KEY_PREFIX", "mlb_video_")

    # Redis Configuration
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_host: str = os.getenv("REDIS_HOST", "localhost")
    redis_port: int = int(os.getenv("REDIS_PORT", "6379"))
    redis_db: int = int(os.getenv("REDIS_DB", "0"))
    redis_password: Optional[str] = os.getenv("REDIS_PASSWORD")

    # Caller capabilities
    editor_api_key: Optional[str] = os.getenv("EDITOR_API_KEY")
    admin_api_key: Optional[str] = os.getenv("ADMIN_API_KEY")

    # Application settings
    site_url: str = os.getenv("SITE_URL", "http://localhost:8000")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def user_agent(self) -> str:
        """Client identifier sent with every upstream request."""
        return f"MLB-Media-Block/{VERSION}; {self.site_url}"


# Global settings instance
settings = Settings()
