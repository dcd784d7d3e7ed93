"""Pytest configuration and fixtures."""
import asyncio
from datetime import datetime, timezone

import pytest

from tickerscore.config import Settings, get_settings
from tickerscore.schemas.metrics import FinancialMetrics
from tickerscore.schemas.stock import HistoricalData, HistoricalDataPoint, StockData
from tickerscore.services.cache_manager import CacheManager, MemoryCache


class FakeProvider:
    """Scriptable provider that records every call."""

    def __init__(self, name="Fake", stock=None, metrics=None, history=None, error=None, delay=0.0):
        self.name = name
        self.stock = stock
        self.metrics = metrics
        self.history = history
        self.error = error
        self.delay = delay
        self.calls: list[tuple[str, str]] = []

    async def _respond(self, kind, ticker, value):
        self.calls.append((kind, ticker))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return value

    async def get_stock_data(self, ticker):
        return await self._respond("stock", ticker, self.stock)

    async def get_financial_metrics(self, ticker):
        return await self._respond("metrics", ticker, self.metrics)

    async def get_historical_data(self, ticker, timeframe="1Y"):
        return await self._respond("historical", ticker, self.history)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Keep real API keys and .env files out of the tests."""
    for var in ("ALPHA_VANTAGE_API_KEY", "LLM_API_KEY", "GROQ_API_KEY"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setitem(Settings.model_config, "env_file", None)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        rate_limit_backoff=0.0,
        stock_timeout=1.0,
        metrics_timeout=1.0,
        historical_timeout=1.0,
        ai_timeout=1.0,
    )


@pytest.fixture
def cache() -> CacheManager:
    return CacheManager(MemoryCache())


@pytest.fixture
def stock_data() -> StockData:
    return StockData(
        symbol="ACME",
        company_name="Acme Corp",
        price=123.45,
        change=1.5,
        change_percent=1.23,
        volume=2_000_000,
        market_cap=5e10,
    )


@pytest.fixture
def strong_metrics() -> FinancialMetrics:
    return FinancialMetrics(
        pe_ratio=10,
        price_to_book=1.0,
        ev_to_ebitda=8,
        roe=0.20,
        net_margin=0.20,
        revenue_growth=0.30,
        earnings_growth=0.30,
        debt_to_equity=0.1,
        current_ratio=2.5,
    )


@pytest.fixture
def weak_metrics() -> FinancialMetrics:
    return FinancialMetrics(
        pe_ratio=40,
        price_to_book=6,
        ev_to_ebitda=25,
        roe=0.01,
        net_margin=0.01,
        revenue_growth=-0.1,
        earnings_growth=-0.1,
        debt_to_equity=2.0,
        current_ratio=0.5,
    )


@pytest.fixture
def history() -> HistoricalData:
    return HistoricalData(
        symbol="ACME",
        timeframe="1M",
        data=[
            HistoricalDataPoint(date="2024-06-03", open=10, high=11, low=9.5, close=10.5, volume=100),
            HistoricalDataPoint(date="2024-06-04", open=10.5, high=12, low=10, close=11.5, volume=300),
            HistoricalDataPoint(date="2024-06-05", open=11.5, high=11.8, low=9, close=9.8, volume=200),
        ],
        last_updated=datetime(2024, 6, 5, tzinfo=timezone.utc),
    )
