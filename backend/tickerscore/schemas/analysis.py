from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from tickerscore.schemas.metrics import FinancialMetrics
from tickerscore.schemas.stock import StockData

Recommendation = Literal["BUY", "HOLD", "SELL"]
RiskLevel = Literal["LOW", "MEDIUM", "HIGH"]


class ScoreBreakdown(BaseModel):
    valuation: float = 50
    profitability: float = 50
    growth: float = 50
    financial_health: float = 50


class InvestmentScore(BaseModel):
    overall: float
    recommendation: Recommendation
    confidence: int  # percent of metrics present
    breakdown: ScoreBreakdown
    risk_level: RiskLevel


class MetricsInsights(BaseModel):
    strengths: list[str] = []
    weaknesses: list[str] = []


class AIAnalysis(BaseModel):
    summary: str
    strengths: list[str] = []
    weaknesses: list[str] = []
    key_risks: list[str] = []
    catalysts: list[str] = []
    recommendation_reasoning: str = ""


class DataSources(BaseModel):
    stock_data: str
    metrics: str


class AnalysisResult(BaseModel):
    ticker: str
    stock_data: StockData
    metrics: FinancialMetrics
    score: InvestmentScore
    ai_analysis: AIAnalysis
    insights: MetricsInsights = MetricsInsights()
    timestamp: datetime
    sources: DataSources
    processing_time_ms: int = 0
    ai_provider: str = ""
    is_partial: bool = False
