"""Shared helpers for bucketing metrics and turning scores into labels."""


def clamp(value: float, low: float = 0, high: float = 100) -> float:
    return max(low, min(high, value))


def bucket_below(value: float, buckets: list[tuple[float, float]], default: float) -> float:
    """Score for metrics where lower is better.

    `buckets` is [(upper_bound, score), ...] in ascending bound order; the first
    bound the value is strictly below wins, otherwise `default`.
    """
    for bound, score in buckets:
        if value < bound:
            return score
    return default


def bucket_above(value: float, buckets: list[tuple[float, float]], default: float) -> float:
    """Score for metrics where higher is better.

    `buckets` is [(lower_bound, score), ...] in descending bound order; the first
    bound the value is strictly above wins, otherwise `default`.
    """
    for bound, score in buckets:
        if value > bound:
            return score
    return default


def mean_or_neutral(scores: list[float], neutral: float = 50.0) -> float:
    if not scores:
        return neutral
    return sum(scores) / len(scores)


def score_to_recommendation(score: float) -> str:
    if score >= 75:
        return "BUY"
    elif score >= 50:
        return "HOLD"
    else:
        return "SELL"


def risk_level(financial_health: float, valuation: float) -> str:
    if financial_health > 75 and valuation > 65:
        return "LOW"
    elif financial_health > 55 and valuation > 45:
        return "MEDIUM"
    else:
        return "HIGH"