import asyncio
import logging
import time
from datetime import datetime, timezone

import httpx

from tickerscore.config import get_settings
from tickerscore.exceptions import ProviderError, RateLimitError
from tickerscore.schemas.metrics import FinancialMetrics, is_present
from tickerscore.schemas.stock import TIMEFRAME_DAYS, HistoricalData, HistoricalDataPoint, StockData

logger = logging.getLogger(__name__)

# TIME_SERIES_DAILY compact responses carry the latest 100 points
COMPACT_POINTS = 100


class RateLimiter:
    """Rolling-window limiter: at most `max_calls` per `period` seconds."""

    def __init__(self, max_calls: int = 5, period: float = 60.0):
        self.max_calls = max_calls
        self.period = period
        self.calls: list[float] = []
        self._lock = asyncio.Lock()

    async def acquire(self):
        async with self._lock:
            now = time.monotonic()
            self.calls = [t for t in self.calls if now - t < self.period]
            if len(self.calls) >= self.max_calls:
                sleep_time = self.period - (now - self.calls[0])
                logger.info(f"Alpha Vantage rate limit: waiting {sleep_time:.1f}s")
                await asyncio.sleep(sleep_time)
            self.calls.append(time.monotonic())


def parse_number(value) -> float | None:
    if value is None or value in ("None", "-", ""):
        return None
    try:
        num = float(value)
    except (TypeError, ValueError):
        return None
    return num if is_present(num) else None


RATE_LIMIT_MARKERS = ("rate limit", "call frequency", "requests per")


def is_rate_limit_notice(message: str) -> bool:
    message = message.lower()
    return any(marker in message for marker in RATE_LIMIT_MARKERS)


def _ratio(numerator: float | None, denominator: float | None) -> float | None:
    if numerator is None or not denominator:
        return None
    return numerator / denominator


class AlphaVantageProvider:
    name = "Alpha Vantage"

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        calls_per_minute: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = get_settings()
        self.api_key = settings.alpha_vantage_api_key if api_key is None else api_key
        self.base_url = base_url or settings.alpha_vantage_base_url
        self.rate_limiter = RateLimiter(max_calls=calls_per_minute or settings.alpha_vantage_calls_per_minute)
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    async def _get(self, function: str, timeout: float = 10, **params) -> dict:
        if not self.enabled:
            raise ProviderError("Alpha Vantage API key not configured")
        await self.rate_limiter.acquire()
        params.update({"function": function, "apikey": self.api_key})
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                resp = await client.get(self.base_url, params=params)
        except httpx.HTTPError as e:
            raise ProviderError(f"Alpha Vantage API error: {e}") from e

        if resp.status_code != 200:
            raise ProviderError(f"Alpha Vantage {function} returned {resp.status_code}")
        try:
            data = resp.json()
        except ValueError as e:
            raise ProviderError(f"Alpha Vantage {function} returned invalid JSON") from e

        if not isinstance(data, dict) or not data:
            raise ProviderError(f"Alpha Vantage {function} returned no data")
        if data.get("Error Message"):
            raise ProviderError(data["Error Message"])
        # Throttled responses come back as 200 with a Note/Information message
        if data.get("Note"):
            raise RateLimitError("Alpha Vantage API rate limit exceeded")
        if data.get("Information"):
            info = str(data["Information"])
            if is_rate_limit_notice(info):
                raise RateLimitError("Alpha Vantage API rate limit exceeded")
            # e.g. premium-only endpoints or parameters
            raise ProviderError(f"Alpha Vantage {function} unavailable: {info}")
        return data

    async def get_stock_data(self, ticker: str) -> StockData:
        logger.info(f"Alpha Vantage: fetching quote for {ticker}")
        data = await self._get("GLOBAL_QUOTE", symbol=ticker)
        quote = data.get("Global Quote") or {}
        if not quote:
            raise ProviderError(f"No data found for ticker {ticker}")

        change_pct = (quote.get("10. change percent") or "").replace("%", "")
        return StockData(
            symbol=ticker,
            # GLOBAL_QUOTE carries no company name
            company_name=f"{ticker} Corporation",
            price=parse_number(quote.get("05. price")) or 0,
            change=parse_number(quote.get("09. change")) or 0,
            change_percent=parse_number(change_pct) or 0,
            volume=int(parse_number(quote.get("06. volume")) or 0),
            market_cap=0,
        )

    async def get_financial_metrics(self, ticker: str) -> FinancialMetrics:
        logger.info(f"Alpha Vantage: fetching overview for {ticker}")
        overview = await self._get("OVERVIEW", timeout=15, symbol=ticker)
        if not overview.get("Symbol"):
            raise ProviderError(f"No financial data found for ticker {ticker}")

        return FinancialMetrics(
            pe_ratio=parse_number(overview.get("PERatio")),
            price_to_book=parse_number(overview.get("PriceToBookRatio")),
            price_to_sales=parse_number(overview.get("PriceToSalesRatioTTM")),
            ev_to_ebitda=parse_number(overview.get("EVToEBITDA")),
            roe=parse_number(overview.get("ReturnOnEquityTTM")),
            roa=parse_number(overview.get("ReturnOnAssetsTTM")),
            gross_margin=_ratio(
                parse_number(overview.get("GrossProfitTTM")),
                parse_number(overview.get("RevenueTTM")),
            ),
            net_margin=parse_number(overview.get("ProfitMargin")),
            debt_to_equity=parse_number(overview.get("DebtToEquityRatio")),
            current_ratio=parse_number(overview.get("CurrentRatio")),
            revenue_growth=parse_number(overview.get("QuarterlyRevenueGrowthYOY")),
            earnings_growth=parse_number(overview.get("QuarterlyEarningsGrowthYOY")),
        )

    async def get_historical_data(self, ticker: str, timeframe: str = "1Y") -> HistoricalData:
        days = TIMEFRAME_DAYS.get(timeframe, TIMEFRAME_DAYS["1Y"])
        output_size = "compact" if days <= COMPACT_POINTS else "full"
        logger.info(f"Alpha Vantage: fetching {timeframe} daily series for {ticker}")
        data = await self._get("TIME_SERIES_DAILY", timeout=15, symbol=ticker, outputsize=output_size)

        series = data.get("Time Series (Daily)") or {}
        if not series:
            raise ProviderError(f"No historical data found for ticker {ticker}")

        points = []
        for date in sorted(series.keys())[-days:]:
            bar = series[date]
            points.append(HistoricalDataPoint(
                date=date,
                open=round(parse_number(bar.get("1. open")) or 0, 2),
                high=round(parse_number(bar.get("2. high")) or 0, 2),
                low=round(parse_number(bar.get("3. low")) or 0, 2),
                close=round(parse_number(bar.get("4. close")) or 0, 2),
                volume=int(parse_number(bar.get("5. volume")) or 0),
            ))

        return HistoricalData(
            symbol=ticker,
            timeframe=timeframe,
            data=points,
            last_updated=datetime.now(timezone.utc),
        )
