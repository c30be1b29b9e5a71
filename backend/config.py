"""Centralized configuration: all env vars in one place."""

import os


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        self.cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
        self.git_sha: str = os.getenv("GIT_SHA", "unknown")
        self.environment: str = os.getenv("ENVIRONMENT", "local")
        self.host: str = os.getenv("HOST", "0.0.0.0")
        self.port: int = int(os.getenv("PORT", "3000"))

        # Upstream API
        self.api_base_url: str | None = os.getenv("API_BASE_URL")
        self.auth_token: str | None = os.getenv("AUTH_TOKEN")
        self.upstream_timeout: float = float(os.getenv("UPSTREAM_TIMEOUT_SECONDS", "10"))

        # Aggregation
        self.top_users_ttl: int = int(os.getenv("TOP_USERS_TTL_SECONDS", "60"))
        self.fanout_concurrency: int = int(os.getenv("FANOUT_CONCURRENCY", "10"))

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def validate(self) -> list[str]:
        """Return list of missing required env vars for upstream access."""
        required = ["API_BASE_URL", "AUTH_TOKEN"]
        return [var for var in required if not getattr(self, _attr_for(var))]


settings = Settings()


def _attr_for(env_var: str) -> str:
    """Map env var name to Settings attribute name."""
    mapping = {
        "API_BASE_URL": "api_base_url",
        "AUTH_TOKEN": "auth_token",
    }
    return mapping.get(env_var, env_var.lower())
