"""
Deterministic synthetic market data.

Everything is derived from the ticker (seed = sum of its character codes), so
the same ticker always yields the same quote, ratios and price shape. Used as
the last-resort provider and whenever the real API times out.
"""
import asyncio
import logging
import math
import random
from datetime import date, datetime, timedelta, timezone

from tickerscore.schemas.metrics import FinancialMetrics
from tickerscore.schemas.stock import TIMEFRAME_DAYS, HistoricalData, HistoricalDataPoint, StockData

logger = logging.getLogger(__name__)

MAX_POINTS = 100

COMPANY_NAMES = {
    "AAPL": "Apple Inc.",
    "MSFT": "Microsoft Corporation",
    "GOOGL": "Alphabet Inc.",
    "AMZN": "Amazon.com Inc.",
    "TSLA": "Tesla Inc.",
    "NVDA": "NVIDIA Corporation",
    "META": "Meta Platforms Inc.",
    "NFLX": "Netflix Inc.",
    "AMD": "Advanced Micro Devices Inc.",
    "INTC": "Intel Corporation",
}

# field -> (min, max, salt)
METRIC_RANGES = {
    "pe_ratio": (10, 40, 1),
    "price_to_book": (0.5, 5, 2),
    "price_to_sales": (1, 10, 3),
    "ev_to_ebitda": (8, 25, 4),
    "roe": (0.05, 0.25, 5),
    "roa": (0.02, 0.15, 6),
    "gross_margin": (0.2, 0.7, 7),
    "net_margin": (0.05, 0.3, 8),
    "debt_to_equity": (0.1, 2.0, 9),
    "current_ratio": (0.8, 3.0, 10),
    "revenue_growth": (-0.1, 0.5, 11),
    "earnings_growth": (-0.2, 0.8, 12),
}


def ticker_seed(ticker: str) -> int:
    return sum(ord(c) for c in ticker)


def seeded_value(seed: int, low: float, high: float, salt: int = 0) -> float:
    """Linear congruential step mapped into [low, high)."""
    value = ((seed + salt) * 9301 + 49297) % 233280
    return low + (value / 233280) * (high - low)


def base_price(ticker: str) -> float:
    return 100 + (ord(ticker[0]) - 65) * 10 if ticker else 100.0


def company_name(ticker: str) -> str:
    return COMPANY_NAMES.get(ticker, f"{ticker} Corporation")


class MockFinancialProvider:
    name = "Mock Provider"

    def __init__(self, latency: float = 0.0, today: date | None = None):
        self.latency = latency
        self._today = today

    async def _simulate_latency(self):
        if self.latency > 0:
            await asyncio.sleep(self.latency)

    async def get_stock_data(self, ticker: str) -> StockData:
        await self._simulate_latency()
        seed = ticker_seed(ticker)
        base = base_price(ticker)
        change = round(seeded_value(seed, -5, 5, 101), 2)
        price = round(base + change, 2)
        shares = seeded_value(seed, 1e8, 1.1e9, 102)
        return StockData(
            symbol=ticker,
            company_name=company_name(ticker),
            price=price,
            change=change,
            change_percent=round(change / base * 100, 2),
            volume=int(seeded_value(seed, 1_000_000, 11_000_000, 103)),
            market_cap=round(price * shares),
        )

    async def get_financial_metrics(self, ticker: str) -> FinancialMetrics:
        await self._simulate_latency()
        seed = ticker_seed(ticker)
        return FinancialMetrics(**{
            field: seeded_value(seed, low, high, salt)
            for field, (low, high, salt) in METRIC_RANGES.items()
        })

    async def get_historical_data(self, ticker: str, timeframe: str = "1Y") -> HistoricalData:
        await self._simulate_latency()
        days = TIMEFRAME_DAYS.get(timeframe, TIMEFRAME_DAYS["1Y"])
        seed = ticker_seed(ticker)
        base = base_price(ticker)
        rng = random.Random(f"{ticker}:{timeframe}")
        today = self._today or datetime.now(timezone.utc).date()
        step = max(1, days // MAX_POINTS)

        points = []
        for i in range(days - 1, -1, -step):
            day = today - timedelta(days=i)
            if day.weekday() >= 5:
                continue

            elapsed = days - i
            trend = math.sin((elapsed / days) * math.pi * 2 + seed) * 0.2
            noise = ((seed + i) % 100) / 1000 - 0.05
            price = base * (1 + trend + noise)

            volatility = price * 0.02
            open_ = price
            high = open_ + rng.random() * volatility
            low = open_ - rng.random() * volatility
            close = low + rng.random() * (high - low)
            base_volume = 1_000_000 + (seed % 100) * 10_000
            volume = int(base_volume * (0.8 + rng.random() * 0.4))

            points.append(HistoricalDataPoint(
                date=day.isoformat(),
                open=round(open_, 2),
                high=round(high, 2),
                low=round(low, 2),
                close=round(close, 2),
                volume=volume,
            ))

        points.sort(key=lambda p: p.date)
        logger.info(f"Generated {len(points)} synthetic {timeframe} points for {ticker}")
        return HistoricalData(
            symbol=ticker,
            timeframe=timeframe,
            data=points,
            last_updated=datetime.now(timezone.utc),
        )
