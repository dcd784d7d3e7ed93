import math

from pydantic import BaseModel


def is_present(value) -> bool:
    """True for a usable number: not None, not NaN, not infinite."""
    if value is None or isinstance(value, bool):
        return False
    if not isinstance(value, (int, float)):
        return False
    return not (math.isnan(value) or math.isinf(value))


class FinancialMetrics(BaseModel):
    # Valuation
    pe_ratio: float | None = None
    price_to_book: float | None = None
    price_to_sales: float | None = None
    ev_to_ebitda: float | None = None

    # Profitability (fractions, 0.15 == 15%)
    roe: float | None = None
    roa: float | None = None
    gross_margin: float | None = None
    net_margin: float | None = None

    # Financial health
    debt_to_equity: float | None = None
    current_ratio: float | None = None

    # Growth (fractions)
    revenue_growth: float | None = None
    earnings_growth: float | None = None

    @classmethod
    def total_count(cls) -> int:
        return len(cls.model_fields)

    def available_count(self) -> int:
        return sum(1 for name in type(self).model_fields if is_present(getattr(self, name)))

    def available(self) -> dict[str, float]:
        return {
            name: getattr(self, name)
            for name in type(self).model_fields
            if is_present(getattr(self, name))
        }
