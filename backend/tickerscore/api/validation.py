"""API request validation utilities."""
import re

from fastapi import HTTPException

from tickerscore.schemas.stock import TIMEFRAMES

TICKER_PATTERN = re.compile(r"[A-Z]{1,5}")


def is_valid_ticker(ticker: str) -> bool:
    return bool(ticker) and TICKER_PATTERN.fullmatch(ticker) is not None


def validate_ticker(ticker: str) -> str:
    """Validate a ticker symbol.

    Valid tickers are 1-5 uppercase letters (AAPL, MSFT, F). Callers that
    accept user input upper-case it first; lowercase here is rejected.

    Raises:
        HTTPException: 400 if the ticker is malformed
    """
    if not is_valid_ticker(ticker):
        raise HTTPException(status_code=400, detail="Invalid ticker format")
    return ticker


def normalize_ticker(raw: str) -> str:
    """Strip and upper-case raw path input, then validate it."""
    return validate_ticker((raw or "").strip().upper())


def validate_timeframe(timeframe: str | None) -> str:
    timeframe = timeframe or "1Y"
    if timeframe not in TIMEFRAMES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid timeframe '{timeframe}'. Use one of: {', '.join(TIMEFRAMES)}",
        )
    return timeframe
