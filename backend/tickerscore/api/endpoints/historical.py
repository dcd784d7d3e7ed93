import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from tickerscore.api.dependencies import get_aggregator
from tickerscore.api.validation import normalize_ticker, validate_timeframe
from tickerscore.schemas.stock import DateRange, HistoricalData, HistoricalResponse, PriceRange, VolumeStats
from tickerscore.services.data_aggregator import DataAggregator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/historical", tags=["historical"])


def summarize(history: HistoricalData) -> tuple[DateRange, PriceRange, VolumeStats]:
    points = history.data
    if not points:
        return DateRange(), PriceRange(), VolumeStats()

    volumes = [p.volume for p in points]
    return (
        DateRange(start=points[0].date, end=points[-1].date),
        PriceRange(
            min=min(p.low for p in points),
            max=max(p.high for p in points),
            start=points[0].close,
            end=points[-1].close,
        ),
        VolumeStats(total=sum(volumes), average=sum(volumes) / len(volumes), max=max(volumes)),
    )


@router.get("/{ticker}")
async def get_historical(
    ticker: str,
    timeframe: str = "1Y",
    aggregator: DataAggregator = Depends(get_aggregator),
):
    start = time.perf_counter()
    ticker = normalize_ticker(ticker)
    timeframe = validate_timeframe(timeframe)

    try:
        logger.info(f"Starting historical data fetch for {ticker} ({timeframe})")
        history, source = await aggregator.get_historical_data(ticker, timeframe)
    except Exception as e:
        processing_time = int((time.perf_counter() - start) * 1000)
        logger.error(f"Historical data error for {ticker} ({processing_time}ms): {e}")
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": str(e) or "Historical data fetch failed",
                "processing_time_ms": processing_time,
            },
        )

    date_range, price_range, volume_stats = summarize(history)
    result = HistoricalResponse(
        ticker=ticker,
        timeframe=timeframe,
        data=history,
        source=source,
        processing_time_ms=int((time.perf_counter() - start) * 1000),
        data_points=len(history.data),
        date_range=date_range,
        price_range=price_range,
        volume_stats=volume_stats,
    )
    logger.info(f"Historical data completed for {ticker} - {result.data_points} points from {source}")
    return {"success": True, "data": result.model_dump(mode="json")}
