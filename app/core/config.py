"""Application configuration settings."""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Feedback Insights API"
    app_env: str = "development"
    debug: bool = True
    api_prefix: str = "/api"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Database
    database_url: str = "sqlite+aiosqlite:///./insights.db"

    # LLM Configuration
    llm_provider: str = "anthropic"  # "anthropic" or "openai"
    anthropic_api_key: str = ""
    openai_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"
    openai_model: str = "gpt-4o-2024-11-20"
    llm_max_tokens: int = 2048
    llm_timeout_seconds: float = 60.0

    # Context bank (markdown reference docs injected into prompts)
    context_dir: str = "./context"

    # Ask
    ask_limit: int = 75

    # Session / access codes
    session_secret: str = ""
    session_max_age_seconds: int = 60 * 60 * 24 * 7
    session_cookie_name: str = "session"
    require_auth: bool = False
    access_codes: str = ""

    # Nexus Mods profile lookup
    nexus_graphql_url: str = "https://api.nexusmods.com/v2/graphql"

    # CORS
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"

    # Security
    allowed_hosts: str = "*"

    @property
    def allowed_hosts_list(self) -> List[str]:
        """Get allowed hosts as a list."""
        return [host.strip() for host in self.allowed_hosts.split(",")]

    @property
    def cors_origins_list(self) -> List[str]:
        """Get CORS origins as a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def access_codes_list(self) -> List[str]:
        """Get seeded access codes as a list."""
        return [code.strip() for code in self.access_codes.split(",") if code.strip()]

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
