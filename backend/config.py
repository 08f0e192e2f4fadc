"""Centralized configuration: all env vars in one place."""

import os


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        self.cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
        self.git_sha: str = os.getenv("GIT_SHA", "unknown")
        self.environment: str = os.getenv("ENVIRONMENT", "local")
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO")

        # Upstream providers
        self.countries_api_url: str = os.getenv("COUNTRIES_API_URL", "https://restcountries.com/v3.1")
        self.weather_api_url: str = os.getenv("WEATHER_API_URL", "https://api.open-meteo.com")
        self.currency_api_url: str = os.getenv("CURRENCY_API_URL", "https://api.frankfurter.app")
        self.http_timeout_seconds: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))

        # Document store
        self.store_backend: str = os.getenv("STORE_BACKEND", "memory").lower()
        self.redis_url: str | None = os.getenv("REDIS_URL")
        self.redis_timeout_seconds: float = float(os.getenv("REDIS_TIMEOUT_SECONDS", "2"))

        self.cache_purge_interval_seconds: float = float(
            os.getenv("CACHE_PURGE_INTERVAL_SECONDS", "3600")
        )

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def validate(self) -> list[str]:
        """Return list of missing env vars required by the selected backends."""
        required = []
        if self.store_backend == "redis":
            required.append("REDIS_URL")
        return [var for var in required if not getattr(self, _attr_for(var))]


settings = Settings()


def _attr_for(env_var: str) -> str:
    """Map env var name to Settings attribute name."""
    mapping = {
        "REDIS_URL": "redis_url",
    }
    return mapping.get(env_var, env_var.lower())
