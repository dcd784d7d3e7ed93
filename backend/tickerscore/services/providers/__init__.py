from tickerscore.services.providers.alpha_vantage import AlphaVantageProvider
from tickerscore.services.providers.mock_provider import MockFinancialProvider

__all__ = [
    "AlphaVantageProvider",
    "MockFinancialProvider",
]
