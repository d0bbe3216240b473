"""Application settings and configuration"""

from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "forkpress"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    # GitHub API
    GITHUB_USERNAME: str = "yebeai"
    GITHUB_TOKEN: Optional[str] = None
    GITHUB_API_URL: str = "https://api.github.com"
    USER_AGENT: str = "forkpress/1.0 (GitHub Pages blog generator)"
    HTTP_TIMEOUT_SECONDS: float = 30.0
    HTTP_MAX_RETRIES: int = 3

    # LLM API for article generation
    LLM_PROVIDER: str = "openai"  # "openai" (any compatible endpoint) or "anthropic"
    LLM_API_KEY: Optional[str] = None  # falls back to GITHUB_TOKEN for GitHub Models
    LLM_BASE_URL: Optional[str] = "https://models.inference.ai.azure.com"
    LLM_MODELS: List[str] = ["gpt-4o", "gpt-4o-mini", "Meta-Llama-3.1-70B-Instruct"]
    LLM_MAX_TOKENS: int = 2000
    LLM_TEMPERATURE: float = 0.7

    # Generation policy
    GENERATION_DELAY_SECONDS: float = 5.0
    MIN_ARTICLE_CHARS: int = 400
    MAX_CONSECUTIVE_FAILURES: int = 3

    # Context limits
    README_MAX_CHARS: int = 4000
    FILE_TREE_MAX_ENTRIES: int = 30

    # Output
    OUTPUT_PATH: str = "forks.json"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env


settings = Settings()
