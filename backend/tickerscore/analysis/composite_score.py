"""
Composite investment score.

Each category averages the bucket scores of the metrics that are present
(50 when none are):
- Valuation (P/E, P/B, EV/EBITDA)
- Profitability (ROE, net margin)
- Growth (revenue growth, earnings growth)
- Financial Health (debt/equity, current ratio)

overall = valuation*0.30 + profitability*0.30 + growth*0.25 + financial_health*0.15

Recommendation: BUY >= 75, HOLD >= 50, else SELL.
Confidence is the share of all twelve metric fields that are present.
"""
from tickerscore.analysis.grading import (
    bucket_above,
    bucket_below,
    clamp,
    mean_or_neutral,
    risk_level,
    score_to_recommendation,
)
from tickerscore.schemas.analysis import InvestmentScore, ScoreBreakdown
from tickerscore.schemas.metrics import FinancialMetrics, is_present

WEIGHTS = {
    "valuation": 0.30,
    "profitability": 0.30,
    "growth": 0.25,
    "financial_health": 0.15,
}

# (bound, score) pairs, checked in order
PE_BUCKETS = [(15, 90), (25, 75), (35, 50)]
PB_BUCKETS = [(1.5, 85), (3, 65), (5, 45)]
EV_EBITDA_BUCKETS = [(10, 85), (15, 70), (20, 55)]
ROE_BUCKETS = [(0.15, 90), (0.10, 75), (0.05, 55)]
NET_MARGIN_BUCKETS = [(0.15, 85), (0.08, 70), (0.03, 55)]
REVENUE_GROWTH_BUCKETS = [(0.20, 90), (0.10, 75), (0, 60)]
EARNINGS_GROWTH_BUCKETS = [(0.25, 90), (0.10, 75), (0, 60)]
DEBT_TO_EQUITY_BUCKETS = [(0.3, 90), (0.6, 75), (1.0, 55)]
CURRENT_RATIO_BUCKETS = [(2.0, 85), (1.5, 75), (1.0, 60)]


class CompositeScoreCalculator:
    weights = WEIGHTS

    @classmethod
    def calculate(cls, metrics: FinancialMetrics) -> InvestmentScore:
        breakdown = ScoreBreakdown(
            valuation=round(cls._score_valuation(metrics), 1),
            profitability=round(cls._score_profitability(metrics), 1),
            growth=round(cls._score_growth(metrics), 1),
            financial_health=round(cls._score_financial_health(metrics), 1),
        )

        overall = round(clamp(cls._weighted_score(breakdown)), 1)

        return InvestmentScore(
            overall=overall,
            recommendation=score_to_recommendation(overall),
            confidence=cls._confidence(metrics),
            breakdown=breakdown,
            risk_level=risk_level(breakdown.financial_health, breakdown.valuation),
        )

    @staticmethod
    def _score_valuation(m: FinancialMetrics) -> float:
        scores = []
        if is_present(m.pe_ratio):
            scores.append(bucket_below(m.pe_ratio, PE_BUCKETS, 25))
        if is_present(m.price_to_book):
            scores.append(bucket_below(m.price_to_book, PB_BUCKETS, 25))
        if is_present(m.ev_to_ebitda):
            scores.append(bucket_below(m.ev_to_ebitda, EV_EBITDA_BUCKETS, 30))
        return mean_or_neutral(scores)

    @staticmethod
    def _score_profitability(m: FinancialMetrics) -> float:
        scores = []
        if is_present(m.roe):
            scores.append(bucket_above(m.roe, ROE_BUCKETS, 30))
        if is_present(m.net_margin):
            scores.append(bucket_above(m.net_margin, NET_MARGIN_BUCKETS, 30))
        return mean_or_neutral(scores)

    @staticmethod
    def _score_growth(m: FinancialMetrics) -> float:
        scores = []
        if is_present(m.revenue_growth):
            scores.append(bucket_above(m.revenue_growth, REVENUE_GROWTH_BUCKETS, 25))
        if is_present(m.earnings_growth):
            scores.append(bucket_above(m.earnings_growth, EARNINGS_GROWTH_BUCKETS, 25))
        return mean_or_neutral(scores)

    @staticmethod
    def _score_financial_health(m: FinancialMetrics) -> float:
        scores = []
        # Lower leverage is better
        if is_present(m.debt_to_equity):
            scores.append(bucket_below(m.debt_to_equity, DEBT_TO_EQUITY_BUCKETS, 30))
        if is_present(m.current_ratio):
            scores.append(bucket_above(m.current_ratio, CURRENT_RATIO_BUCKETS, 30))
        return mean_or_neutral(scores)

    @classmethod
    def _weighted_score(cls, breakdown: ScoreBreakdown) -> float:
        return (
            breakdown.valuation * cls.weights["valuation"]
            + breakdown.profitability * cls.weights["profitability"]
            + breakdown.growth * cls.weights["growth"]
            + breakdown.financial_health * cls.weights["financial_health"]
        )

    @staticmethod
    def _confidence(metrics: FinancialMetrics) -> int:
        return round(metrics.available_count() / FinancialMetrics.total_count() * 100)


def calculate_score(metrics: FinancialMetrics) -> InvestmentScore:
    return CompositeScoreCalculator.calculate(metrics)
