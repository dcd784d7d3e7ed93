from datetime import datetime
from typing import Literal

from pydantic import BaseModel

Timeframe = Literal["1M", "3M", "6M", "1Y", "2Y", "5Y"]

TIMEFRAMES: tuple[str, ...] = ("1M", "3M", "6M", "1Y", "2Y", "5Y")

# Trading days covered by each timeframe
TIMEFRAME_DAYS: dict[str, int] = {
    "1M": 22,
    "3M": 65,
    "6M": 130,
    "1Y": 250,
    "2Y": 500,
    "5Y": 1250,
}


class StockData(BaseModel):
    symbol: str
    company_name: str
    price: float
    change: float = 0
    change_percent: float = 0
    volume: int = 0
    market_cap: float = 0


class HistoricalDataPoint(BaseModel):
    date: str  # YYYY-MM-DD
    open: float
    high: float
    low: float
    close: float
    volume: int


class HistoricalData(BaseModel):
    symbol: str
    timeframe: Timeframe
    data: list[HistoricalDataPoint] = []
    last_updated: datetime


class DateRange(BaseModel):
    start: str | None = None
    end: str | None = None


class PriceRange(BaseModel):
    min: float | None = None  # lowest low
    max: float | None = None  # highest high
    start: float | None = None  # first close
    end: float | None = None  # last close


class VolumeStats(BaseModel):
    total: int = 0
    average: float = 0
    max: int = 0


class HistoricalResponse(BaseModel):
    ticker: str
    timeframe: Timeframe
    data: HistoricalData
    source: str
    processing_time_ms: int
    data_points: int
    date_range: DateRange
    price_range: PriceRange
    volume_stats: VolumeStats
