import logging
from datetime import datetime, timezone

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tickerscore.api.dependencies import get_aggregator
from tickerscore.api.endpoints import analysis, debug, historical
from tickerscore.config import get_settings
from tickerscore.services.ai_analyzer import FALLBACK_PROVIDER
from tickerscore.services.data_aggregator import DataAggregator

logging.basicConfig(level=logging.INFO)

settings = get_settings()

app = FastAPI(title="TickerScore API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(analysis.router)
app.include_router(historical.router)
app.include_router(debug.router)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.detail})


@app.get("/api/health")
async def health_check(aggregator: DataAggregator = Depends(get_aggregator)):
    current = get_settings()
    return {
        "success": True,
        "data": {
            "status": "ok",
            "service": "TickerScore",
            "llm": {
                "configured": current.llm_configured,
                "model": current.llm_model if current.llm_configured else None,
            },
            "market_data": {"configured": current.market_data_configured},
            "fallback": FALLBACK_PROVIDER,
            "cache_entries": aggregator.cache.size(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    }
