import asyncio
import logging

from tickerscore.config import get_settings
from tickerscore.schemas.analysis import AIAnalysis, InvestmentScore
from tickerscore.schemas.metrics import FinancialMetrics
from tickerscore.services.llm_service import LLMService

logger = logging.getLogger(__name__)

FALLBACK_PROVIDER = "Template Fallback"
PENDING_PROVIDER = "Loading"


def fallback_analysis(ticker: str, score: InvestmentScore) -> AIAnalysis:
    b = score.breakdown
    return AIAnalysis(
        summary=(
            f"{ticker} shows {score.recommendation} signals with overall score of "
            f"{score.overall:.0f}/100. This is a fallback analysis."
        ),
        strengths=[
            "Solid profitability metrics" if b.profitability > 60 else "Stable business operations",
            "Strong balance sheet" if b.financial_health > 60 else "Adequate financial position",
        ],
        weaknesses=[
            "Premium valuation levels" if b.valuation < 50 else "Market volatility concerns",
        ],
        key_risks=["Market volatility", "Sector-specific risks", "Economic uncertainty"],
        catalysts=["Upcoming earnings report", "Industry developments", "Market expansion opportunities"],
        recommendation_reasoning=(
            f"Based on quantitative analysis, {ticker} receives a {score.recommendation} "
            f"recommendation with {score.overall:.0f}/100 overall score. Key metrics include "
            f"profitability score of {b.profitability:.0f} and financial health score of "
            f"{b.financial_health:.0f}."
        ),
    )


def pending_analysis() -> AIAnalysis:
    return AIAnalysis(
        summary="AI analysis loading...",
        strengths=["Analysis in progress"],
        weaknesses=["Analysis in progress"],
        key_risks=["Analysis in progress"],
        catalysts=["Analysis in progress"],
        recommendation_reasoning="Detailed AI analysis will be available shortly",
    )


class AIAnalyzer:
    def __init__(self, llm: LLMService | None = None, timeout: float | None = None):
        settings = get_settings()
        self.llm = llm or LLMService()
        self.timeout = settings.ai_timeout if timeout is None else timeout
        self.provider_label = settings.llm_provider_label

    async def analyze(
        self,
        ticker: str,
        metrics: FinancialMetrics,
        score: InvestmentScore,
        price: float | None = None,
    ) -> tuple[AIAnalysis, str]:
        """Return (narrative, provider label); never raises for LLM failures."""
        if not self.llm.is_configured:
            logger.info(f"LLM not configured, using template analysis for {ticker}")
            return fallback_analysis(ticker, score), FALLBACK_PROVIDER

        try:
            analysis = await asyncio.wait_for(
                self.llm.analyze(ticker, metrics, score, price),
                timeout=self.timeout,
            )
            return analysis, self.provider_label
        except asyncio.TimeoutError:
            logger.warning(f"AI analysis timed out for {ticker} after {self.timeout}s, using fallback")
        except Exception as e:
            logger.error(f"AI analysis failed for {ticker}: {e}")
        return fallback_analysis(ticker, score), FALLBACK_PROVIDER
