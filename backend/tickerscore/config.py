from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Market data
    alpha_vantage_api_key: str = ""
    alpha_vantage_base_url: str = "https://www.alphavantage.co/query"
    alpha_vantage_calls_per_minute: int = 5  # free tier

    # LLM (any OpenAI-compatible endpoint, Groq by default)
    llm_api_key: str = Field(default="", validation_alias=AliasChoices("llm_api_key", "groq_api_key"))
    llm_base_url: str = "https://api.groq.com/openai/v1"
    llm_model: str = "llama-3.1-8b-instant"
    llm_provider_label: str = "Groq Llama 3.1"
    llm_max_tokens: int = 1024
    llm_temperature: float = 0.7

    # Timeouts in seconds
    stock_timeout: float = 8.0
    metrics_timeout: float = 10.0
    historical_timeout: float = 10.0
    ai_timeout: float = 15.0
    rate_limit_backoff: float = 1.0

    # Cache TTLs in seconds
    stock_cache_ttl: int = 60
    metrics_cache_ttl: int = 300
    historical_cache_ttl: int = 600
    mock_historical_cache_ttl: int = 300

    # Artificial latency for the synthetic provider
    mock_latency: float = 0.0

    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    model_config = {"env_file": ".env", "extra": "ignore"}

    @property
    def llm_configured(self) -> bool:
        return bool(self.llm_api_key)

    @property
    def market_data_configured(self) -> bool:
        return bool(self.alpha_vantage_api_key)


@lru_cache
def get_settings() -> Settings:
    return Settings()
