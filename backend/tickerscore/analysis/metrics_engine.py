from tickerscore.analysis.composite_score import CompositeScoreCalculator
from tickerscore.schemas.analysis import InvestmentScore, MetricsInsights
from tickerscore.schemas.metrics import FinancialMetrics

STRONG_THRESHOLD = 75
WEAK_THRESHOLD = 40


def _pct(value: float | None) -> str:
    return f"{(value or 0) * 100:.1f}%"


def _num(value: float | None, digits: int = 1) -> str:
    return f"{value:.{digits}f}" if value is not None else "N/A"


class MetricsEngine:
    @staticmethod
    def calculate_score(metrics: FinancialMetrics) -> InvestmentScore:
        return CompositeScoreCalculator.calculate(metrics)

    @classmethod
    def calculate_all(cls, metrics: FinancialMetrics) -> tuple[InvestmentScore, MetricsInsights]:
        score = cls.calculate_score(metrics)
        insights = MetricsInsights(
            strengths=cls.identify_strengths(metrics, score),
            weaknesses=cls.identify_weaknesses(metrics, score),
        )
        return score, insights

    @staticmethod
    def identify_strengths(metrics: FinancialMetrics, score: InvestmentScore) -> list[str]:
        b = score.breakdown
        strengths = []
        if b.profitability > STRONG_THRESHOLD:
            strengths.append(f"Excellent profitability with ROE of {_pct(metrics.roe)}")
        if b.valuation > STRONG_THRESHOLD:
            strengths.append(f"Attractive valuation with P/E of {_num(metrics.pe_ratio)}")
        if b.growth > STRONG_THRESHOLD:
            strengths.append(f"Strong revenue growth of {_pct(metrics.revenue_growth)}")
        if b.financial_health > STRONG_THRESHOLD:
            strengths.append(
                f"Solid balance sheet with debt/equity of {_num(metrics.debt_to_equity, 2)}"
            )
        return strengths or ["Company shows stable metrics"]

    @staticmethod
    def identify_weaknesses(metrics: FinancialMetrics, score: InvestmentScore) -> list[str]:
        b = score.breakdown
        weaknesses = []
        if b.profitability < WEAK_THRESHOLD:
            weaknesses.append(f"Low profitability with ROE of {_pct(metrics.roe)}")
        if b.valuation < WEAK_THRESHOLD:
            weaknesses.append(f"Stretched valuation with P/E of {_num(metrics.pe_ratio)}")
        if b.growth < WEAK_THRESHOLD:
            weaknesses.append(f"Limited revenue growth of {_pct(metrics.revenue_growth)}")
        if b.financial_health < WEAK_THRESHOLD:
            weaknesses.append("Concerning balance sheet with high leverage")
        return weaknesses or ["No significant weaknesses identified"]
