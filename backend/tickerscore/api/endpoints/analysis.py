import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from tickerscore.analysis.metrics_engine import MetricsEngine
from tickerscore.api.dependencies import get_ai_analyzer, get_aggregator
from tickerscore.api.validation import normalize_ticker
from tickerscore.schemas.analysis import AnalysisResult
from tickerscore.services.ai_analyzer import PENDING_PROVIDER, AIAnalyzer, pending_analysis
from tickerscore.services.data_aggregator import DataAggregator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/analysis", tags=["analysis"])


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


@router.get("/{ticker}")
async def get_analysis(
    ticker: str,
    skip_ai: bool = Query(False),
    skip_ai_alias: bool = Query(False, alias="skipAI", include_in_schema=False),
    aggregator: DataAggregator = Depends(get_aggregator),
    ai_analyzer: AIAnalyzer = Depends(get_ai_analyzer),
):
    start = time.perf_counter()
    ticker = normalize_ticker(ticker)
    skip_ai = skip_ai or skip_ai_alias

    try:
        logger.info(f"Starting analysis for {ticker}")
        stock_data, metrics, sources = await aggregator.get_data_with_sources(ticker)
        score, insights = MetricsEngine.calculate_all(metrics)

        if skip_ai:
            ai_analysis, ai_provider = pending_analysis(), PENDING_PROVIDER
        else:
            ai_analysis, ai_provider = await ai_analyzer.analyze(ticker, metrics, score, stock_data.price)

        result = AnalysisResult(
            ticker=ticker,
            stock_data=stock_data,
            metrics=metrics,
            score=score,
            ai_analysis=ai_analysis,
            insights=insights,
            timestamp=datetime.now(timezone.utc),
            sources=sources,
            processing_time_ms=_elapsed_ms(start),
            ai_provider=ai_provider,
            is_partial=skip_ai,
        )
    except Exception as e:
        processing_time = _elapsed_ms(start)
        logger.error(f"Analysis error for {ticker} ({processing_time}ms): {e}")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": str(e) or "Analysis failed", "processing_time_ms": processing_time},
        )

    logger.info(
        f"Analysis completed for {ticker} - Score: {score.overall:.0f}/100 - Time: {result.processing_time_ms}ms"
    )
    return {"success": True, "data": result.model_dump(mode="json")}
