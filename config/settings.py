from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Keys
    OPENAI_API_KEY: Optional[str] = ""
    OPENAI_BASE_URL: Optional[str] = None
    ANTHROPIC_API_KEY: Optional[str] = ""

    # Application Settings
    APP_NAME: str = "Brand Visibility Analyzer"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # LLM Provider Configuration
    # Options: "openai", "claude"
    LLM_PROVIDER: str = "openai"

    # Model Settings - one per pipeline stage
    QUERY_MODEL: str = "gpt-4.1-mini"
    RESEARCH_MODEL: str = "gpt-4.1-mini"  # Must support hosted web search
    EXTRACTION_MODEL: str = "gpt-4.1-mini"
    SUGGESTION_MODEL: str = "gpt-4.1-mini"
    SCAN_MODEL: str = "gpt-4o-mini"  # Single-call strict-schema scan

    LLM_TEMPERATURE: float = 0.7
    SCAN_TEMPERATURE: float = 0.2
    LLM_MAX_TOKENS: int = 4000
    LLM_REQUEST_TIMEOUT: float = 300.0

    # Workflow Settings
    # Options: "multi_call", "single_call"
    ANALYSIS_STRATEGY: str = "multi_call"
    DEFAULT_DIRECT_QUERIES: int = 1
    DEFAULT_INTERMEDIATE_QUERIES: int = 1
    DEFAULT_INDIRECT_QUERIES: int = 1
    MAX_PARALLEL_QUERIES: int = 1  # 1 = one query at a time

    # Deadlines (seconds)
    RUN_TIMEOUT_SECONDS: float = 600.0
    QUERY_TIMEOUT_SECONDS: float = 300.0
    SCAN_TIMEOUT_SECONDS: float = 120.0

    # Redis Settings
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_MAX_CONNECTIONS: int = 10
    REDIS_KEY_PREFIX: str = "brandvis"

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()


def build_llm_config(source: Settings = None, temperature: Optional[float] = None):
    """
    Build the explicit configuration injected into the generative client.

    Args:
        source: Settings instance (defaults to the module singleton)
        temperature: Override for the sampling temperature

    Returns:
        LLMConfig for GenerativeClient
    """
    from utils.llm_client import LLMConfig

    source = source or settings
    provider = source.LLM_PROVIDER.lower()
    api_key = source.ANTHROPIC_API_KEY if provider == "claude" else source.OPENAI_API_KEY

    return LLMConfig(
        provider=provider,
        api_key=api_key or "",
        base_url=source.OPENAI_BASE_URL if provider == "openai" else None,
        temperature=source.LLM_TEMPERATURE if temperature is None else temperature,
        max_tokens=source.LLM_MAX_TOKENS,
        request_timeout=source.LLM_REQUEST_TIMEOUT
    )
