import asyncio
from datetime import date

from tickerscore.services.data_aggregator import (
    validate_financial_metrics,
    validate_historical_data,
    validate_stock_data,
)
from tickerscore.services.providers.mock_provider import (
    METRIC_RANGES,
    MockFinancialProvider,
    seeded_value,
    ticker_seed,
)

FRIDAY = date(2024, 6, 14)


def test_metrics_are_deterministic_and_in_range():
    provider = MockFinancialProvider()
    first = asyncio.run(provider.get_financial_metrics("AAPL"))
    second = asyncio.run(MockFinancialProvider().get_financial_metrics("AAPL"))

    assert first == second
    assert first.available_count() == 12
    for field, (low, high, _) in METRIC_RANGES.items():
        assert low <= getattr(first, field) <= high
    assert validate_financial_metrics(first)


def test_metrics_follow_seeded_formula():
    metrics = asyncio.run(MockFinancialProvider().get_financial_metrics("MSFT"))
    seed = ticker_seed("MSFT")
    assert metrics.pe_ratio == seeded_value(seed, 10, 40, 1)
    assert metrics.earnings_growth == seeded_value(seed, -0.2, 0.8, 12)


def test_stock_data_is_deterministic_and_valid():
    provider = MockFinancialProvider()
    quote = asyncio.run(provider.get_stock_data("AAPL"))

    assert quote == asyncio.run(provider.get_stock_data("AAPL"))
    assert quote.company_name == "Apple Inc."
    assert 95 <= quote.price <= 105  # base 100 for tickers starting with A
    assert validate_stock_data(quote)


def test_unknown_ticker_gets_generic_name():
    quote = asyncio.run(MockFinancialProvider().get_stock_data("ZZZ"))
    assert quote.company_name == "ZZZ Corporation"


def test_history_skips_weekends_and_is_sorted():
    provider = MockFinancialProvider(today=FRIDAY)
    history = asyncio.run(provider.get_historical_data("AAPL", "1M"))

    dates = [p.date for p in history.data]
    assert dates == sorted(dates)
    assert dates[-1] == "2024-06-14"
    assert all(date.fromisoformat(d).weekday() < 5 for d in dates)
    assert 0 < len(dates) <= 22
    assert history.timeframe == "1M"
    assert validate_historical_data(history)


def test_long_history_is_downsampled():
    provider = MockFinancialProvider(today=FRIDAY)
    history = asyncio.run(provider.get_historical_data("NVDA", "5Y"))

    assert 0 < len(history.data) <= 105
    for point in history.data:
        assert point.low <= point.close <= point.high


def test_history_is_repeatable():
    provider = MockFinancialProvider(today=FRIDAY)
    first = asyncio.run(provider.get_historical_data("TSLA", "6M"))
    second = asyncio.run(provider.get_historical_data("TSLA", "6M"))
    assert first.data == second.data
