"""
Configuration settings for Sonar.
Loads environment variables and provides typed configuration.
"""
import os
from typing import Optional
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Keys
    exa_api_key: str = os.getenv("EXA_API_KEY", "")
    github_token: Optional[str] = os.getenv("GITHUB_TOKEN") or None

    # Upstream endpoints
    exa_api_url: str = "https://api.exa.ai"
    github_api_url: str = "https://api.github.com"

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./sonar.db")

    # Application
    app_name: str = "Sonar"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_json: bool = False

    # Candidate discovery
    search_domain: str = "github.com"
    max_queries: int = 3
    results_per_query: int = 20
    description_query_chars: int = 200
    max_candidates: int = 20
    enrichment_concurrency: int = 1  # 1 = sequential, keep <= 5

    # Ranking
    score_threshold: int = 35
    max_results: int = 10

    # Rate limiting (per caller)
    search_rate_limit: int = 5
    search_rate_window_seconds: int = 60

    class Config:
        env_file = ".env"
        extra = "ignore"


# Global settings instance
settings = Settings()
