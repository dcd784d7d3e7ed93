import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from tickerscore.api.dependencies import get_aggregator
from tickerscore.api.validation import normalize_ticker
from tickerscore.schemas.metrics import FinancialMetrics
from tickerscore.services.data_aggregator import DataAggregator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/debug", tags=["debug"])


@router.get("/{ticker}")
async def debug_ticker(
    ticker: str,
    aggregator: DataAggregator = Depends(get_aggregator),
):
    """Raw provider output and metric coverage for a ticker."""
    ticker = normalize_ticker(ticker)
    try:
        stock_data, metrics, sources = await aggregator.get_data_with_sources(ticker)
    except Exception as e:
        logger.error(f"Debug fetch failed for {ticker}: {e}")
        return JSONResponse(status_code=500, content={"success": False, "error": str(e), "ticker": ticker})

    available = metrics.available_count()
    total = FinancialMetrics.total_count()
    return {
        "success": True,
        "debug": {
            "ticker": ticker,
            "sources": sources.model_dump(),
            "raw_stock_data": stock_data.model_dump(),
            "raw_metrics": metrics.model_dump(),
            "metrics_available": available,
            "total_metrics": total,
            "coverage": f"{round(available / total * 100)}%",
        },
    }
