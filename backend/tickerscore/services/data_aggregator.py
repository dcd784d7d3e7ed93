import asyncio
import logging
from typing import NamedTuple

from tickerscore.config import Settings, get_settings
from tickerscore.exceptions import AllProvidersFailedError, RateLimitError
from tickerscore.schemas.analysis import DataSources
from tickerscore.schemas.metrics import FinancialMetrics, is_present
from tickerscore.schemas.stock import HistoricalData, StockData
from tickerscore.services.cache_manager import CacheManager
from tickerscore.services.providers import AlphaVantageProvider, MockFinancialProvider

logger = logging.getLogger(__name__)

MIN_VALID_METRICS = 3
FALLBACK_LABEL = "Mock Provider (Fallback)"


class ProviderResult(NamedTuple):
    data: StockData | FinancialMetrics | HistoricalData
    source: str


class AggregatedData(NamedTuple):
    stock_data: StockData
    metrics: FinancialMetrics
    sources: DataSources


def validate_stock_data(data: StockData) -> bool:
    return (
        bool(data.symbol)
        and is_present(data.price)
        and data.price > 0
        and bool(data.company_name and data.company_name.strip())
    )


def validate_financial_metrics(data: FinancialMetrics) -> bool:
    return data.available_count() >= MIN_VALID_METRICS


def validate_historical_data(data: HistoricalData) -> bool:
    return (
        bool(data.symbol)
        and len(data.data) > 0
        and all(
            p.date and is_present(p.close) and p.close > 0 and p.volume >= 0
            for p in data.data
        )
    )


def _is_rate_limit(error: Exception) -> bool:
    return isinstance(error, RateLimitError) or "rate limit" in str(error).lower()


class DataAggregator:
    def __init__(
        self,
        providers: list | None = None,
        fallback=None,
        cache: CacheManager | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.fallback = fallback or MockFinancialProvider(latency=self.settings.mock_latency)
        if providers is None:
            providers = [AlphaVantageProvider(), self.fallback]
        self.providers = providers
        self.cache = cache or CacheManager()
        self._background: set[asyncio.Task] = set()

    async def _resolve(self, kind: str, ticker: str, method: str, validator, providers: list, *args) -> ProviderResult:
        """Ask each provider in rank order; first validated response wins."""
        errors: list[str] = []
        for provider in providers:
            try:
                data = await getattr(provider, method)(ticker, *args)
            except Exception as e:
                logger.warning(f"{provider.name} {kind} failed for {ticker}: {e}")
                errors.append(f"{provider.name}: {e}")
                if _is_rate_limit(e):
                    logger.info(f"Rate limit detected, waiting {self.settings.rate_limit_backoff}s")
                    await asyncio.sleep(self.settings.rate_limit_backoff)
                continue

            if validator(data):
                logger.info(f"{kind.capitalize()} success with {provider.name} for {ticker}")
                return ProviderResult(data, provider.name)

            logger.warning(f"{provider.name} returned invalid {kind} for {ticker}")
            errors.append(f"{provider.name}: invalid {kind}")

        raise AllProvidersFailedError(kind, ticker, errors)

    # ── Quote ────────────────────────────────────────────────────────

    async def get_stock_data(self, ticker: str) -> ProviderResult:
        cached = self.cache.get_stock(ticker)
        if cached:
            logger.info(f"Memory cache hit for {ticker} stock data")
            return cached

        result = await self._resolve("stock data", ticker, "get_stock_data", validate_stock_data, self.providers)
        self.cache.set_stock(ticker, result, self.settings.stock_cache_ttl)
        return result

    # ── Fundamentals ─────────────────────────────────────────────────

    async def get_financial_metrics(self, ticker: str) -> ProviderResult:
        cached = self.cache.get_metrics(ticker)
        if cached:
            logger.info(f"Memory cache hit for {ticker} metrics")
            return cached

        result = await self._resolve(
            "metrics", ticker, "get_financial_metrics", validate_financial_metrics, self.providers
        )
        self.cache.set_metrics(ticker, result, self.settings.metrics_cache_ttl)
        return result

    # ── Historical series ────────────────────────────────────────────

    async def get_historical_data(self, ticker: str, timeframe: str = "1Y") -> ProviderResult:
        cached = self.cache.get_historical(ticker, timeframe)
        if cached:
            logger.info(f"Memory cache hit for {ticker} historical data ({timeframe})")
            return cached

        real_providers = [p for p in self.providers if p is not self.fallback]
        try:
            result = await asyncio.wait_for(
                self._resolve(
                    "historical data", ticker, "get_historical_data",
                    validate_historical_data, real_providers, timeframe,
                ),
                timeout=self.settings.historical_timeout,
            )
            self.cache.set_historical(ticker, timeframe, result, self.settings.historical_cache_ttl)
            return result
        except AllProvidersFailedError as e:
            errors = e.errors
        except asyncio.TimeoutError:
            logger.warning(f"Historical data timed out for {ticker} after {self.settings.historical_timeout}s")
            errors = [f"timeout after {self.settings.historical_timeout}s"]

        try:
            data = await self.fallback.get_historical_data(ticker, timeframe)
        except Exception as e:
            logger.error(f"Synthetic historical data failed for {ticker}: {e}")
            raise AllProvidersFailedError("historical data", ticker, errors + [f"{self.fallback.name}: {e}"]) from e

        logger.info(f"Using synthetic historical data for {ticker}")
        result = ProviderResult(data, self.fallback.name)
        self.cache.set_historical(ticker, timeframe, result, self.settings.mock_historical_cache_ttl)
        return result

    # ── Combined ─────────────────────────────────────────────────────

    async def get_data_with_sources(self, ticker: str) -> AggregatedData:
        """Fetch quote and fundamentals concurrently, each raced against a timeout.

        Either side that fails or times out is replaced by synthetic data
        labelled as a fallback, so this never raises for provider failures.
        """
        ticker = ticker.upper()
        logger.info(f"Starting parallel data fetch for {ticker}")

        stock_result, metrics_result = await asyncio.gather(
            asyncio.wait_for(self.get_stock_data(ticker), timeout=self.settings.stock_timeout),
            asyncio.wait_for(self.get_financial_metrics(ticker), timeout=self.settings.metrics_timeout),
            return_exceptions=True,
        )

        if isinstance(stock_result, ProviderResult):
            stock_data, stock_source = stock_result
        else:
            logger.warning(f"Stock data failed for {ticker} ({_describe(stock_result)}), using synthetic data")
            stock_data = await self.fallback.get_stock_data(ticker)
            stock_source = FALLBACK_LABEL

        if isinstance(metrics_result, ProviderResult):
            metrics, metrics_source = metrics_result
        else:
            logger.warning(f"Metrics failed for {ticker} ({_describe(metrics_result)}), using synthetic data")
            metrics = await self.fallback.get_financial_metrics(ticker)
            metrics_source = FALLBACK_LABEL

        return AggregatedData(
            stock_data=stock_data,
            metrics=metrics,
            sources=DataSources(stock_data=stock_source, metrics=metrics_source),
        )

    async def get_batch_data(self, tickers: list[str]) -> dict[str, AggregatedData]:
        results = await asyncio.gather(
            *(self.get_data_with_sources(t) for t in tickers),
            return_exceptions=True,
        )
        batch = {}
        for ticker, result in zip(tickers, results):
            if isinstance(result, BaseException):
                logger.warning(f"Batch fetch failed for {ticker}: {result}")
                continue
            batch[ticker.upper()] = result
        return batch

    def prefetch(self, tickers: list[str]) -> list[asyncio.Task]:
        """Warm the cache in the background. Must be called from a running loop."""
        logger.info(f"Background prefetching for: {', '.join(tickers)}")
        tasks = []
        for ticker in tickers:
            task = asyncio.create_task(self._prefetch_one(ticker))
            self._background.add(task)
            task.add_done_callback(self._background.discard)
            tasks.append(task)
        return tasks

    async def _prefetch_one(self, ticker: str):
        try:
            await self.get_data_with_sources(ticker)
        except Exception as e:
            logger.warning(f"Background prefetch failed for {ticker}: {e}")


def _describe(error: BaseException) -> str:
    if isinstance(error, asyncio.TimeoutError):
        return "timeout"
    return str(error) or type(error).__name__
