from functools import lru_cache

from tickerscore.services.ai_analyzer import AIAnalyzer
from tickerscore.services.data_aggregator import DataAggregator


@lru_cache
def get_aggregator() -> DataAggregator:
    """Process-wide aggregator so the provider rate limiter and cache are shared."""
    return DataAggregator()


@lru_cache
def get_ai_analyzer() -> AIAnalyzer:
    return AIAnalyzer()
