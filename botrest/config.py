from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """REST client settings loaded from the environment with `.env` overrides."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Service Configuration
    SERVICE_NAME: str = "botrest"
    SERVICE_VERSION: str = "1.0.0"

    # API Configuration
    BOT_TOKEN: str = ""
    API_BASE_URL: str = "https://discord.com/api"
    API_VERSION: int = 10
    USER_AGENT: Optional[str] = None

    # Request Configuration
    REQUEST_TIMEOUT: float = 30.0
    SCHEDULER_CONCURRENCY: int = Field(default=1, ge=1)

    # Rate Limiting Configuration
    RATE_LIMIT_GUARD_MARGIN: float = Field(default=0.1, ge=0)
    RATE_LIMIT_POLL_INTERVAL: float = Field(default=1.0, gt=0)

    # Cache Configuration
    CACHE_ENABLED: bool = True

    # Logging Configuration
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"

    @property
    def api_url(self) -> str:
        """Fixed host plus versioned API prefix."""
        return f"{self.API_BASE_URL.rstrip('/')}/v{self.API_VERSION}"

    @property
    def user_agent(self) -> str:
        return self.USER_AGENT or f"DiscordBot ({self.SERVICE_NAME}, {self.SERVICE_VERSION})"


def get_settings() -> Settings:
    return Settings()


settings = get_settings()
