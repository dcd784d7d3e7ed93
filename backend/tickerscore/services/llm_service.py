import json
import logging
import re

from tickerscore.config import get_settings
from tickerscore.exceptions import NarrativeError
from tickerscore.schemas.analysis import AIAnalysis, InvestmentScore
from tickerscore.schemas.metrics import FinancialMetrics

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a senior equity analyst with 15 years of Wall Street experience.
Given a company's financial ratios and a quantitative investment score, write a concise investment narrative.

Respond ONLY with valid JSON in this exact format:
{
  "summary": "2 sentence summary citing specific numbers",
  "strengths": ["strength 1", "strength 2", "strength 3"],
  "weaknesses": ["weakness 1", "weakness 2"],
  "key_risks": ["risk 1", "risk 2", "risk 3"],
  "catalysts": ["catalyst 1", "catalyst 2"],
  "recommendation_reasoning": "3-4 sentences explaining the recommendation, citing specific metrics"
}
"""

# Metrics shown as percentages in the prompt
PERCENT_FIELDS = {"roe", "roa", "gross_margin", "net_margin", "revenue_growth", "earnings_growth"}

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


def build_prompt(
    ticker: str,
    metrics: FinancialMetrics,
    score: InvestmentScore,
    price: float | None = None,
) -> str:
    metric_lines = []
    for key, value in metrics.available().items():
        if key in PERCENT_FIELDS:
            metric_lines.append(f"  {key}: {value * 100:.1f}%")
        else:
            metric_lines.append(f"  {key}: {value:.2f}")

    parts = [
        f"Analyze {ticker}",
        f"Price: ${price:.2f}" if price else "Price: N/A",
        "Metrics:\n" + ("\n".join(metric_lines) if metric_lines else "  none available"),
        (
            f"Score: {score.overall:.0f}/100 ({score.recommendation}), "
            f"risk {score.risk_level}, confidence {score.confidence}%"
        ),
    ]
    return "\n\n".join(parts)


def parse_analysis(raw: str) -> AIAnalysis:
    """Parse the model output, falling back to the first {...} block in the text."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        match = _JSON_OBJECT.search(raw)
        if not match:
            raise NarrativeError("LLM response contained no JSON object")
        try:
            data = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            raise NarrativeError(f"Failed to parse LLM response: {e}") from e

    if not isinstance(data, dict) or not data.get("summary") or not data.get("strengths") or not data.get("weaknesses"):
        raise NarrativeError("Invalid response structure from LLM")

    # Accept camelCase keys as well
    data.setdefault("key_risks", data.get("keyRisks", []))
    data.setdefault("recommendation_reasoning", data.get("recommendationReasoning", ""))
    return AIAnalysis(
        summary=data["summary"],
        strengths=[str(s) for s in data["strengths"]],
        weaknesses=[str(w) for w in data["weaknesses"]],
        key_risks=[str(r) for r in data.get("key_risks") or []],
        catalysts=[str(c) for c in data.get("catalysts") or []],
        recommendation_reasoning=str(data.get("recommendation_reasoning") or ""),
    )


class LLMService:
    def __init__(self, client=None):
        settings = get_settings()
        self.api_key = settings.llm_api_key
        self.base_url = settings.llm_base_url
        self.model = settings.llm_model
        self.max_tokens = settings.llm_max_tokens
        self.temperature = settings.llm_temperature
        self._client = client

    @property
    def client(self):
        if self._client is None:
            import openai
            self._client = openai.AsyncOpenAI(api_key=self.api_key, base_url=self.base_url)
        return self._client

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key) or self._client is not None

    async def analyze(
        self,
        ticker: str,
        metrics: FinancialMetrics,
        score: InvestmentScore,
        price: float | None = None,
    ) -> AIAnalysis:
        if not self.is_configured:
            raise NarrativeError("LLM API key not configured")

        response = await self.client.chat.completions.create(
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            response_format={"type": "json_object"},
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_prompt(ticker, metrics, score, price)},
            ],
        )

        raw = response.choices[0].message.content if response.choices else None
        if not raw:
            raise NarrativeError("Empty response from LLM")

        analysis = parse_analysis(raw)
        logger.info(f"LLM analysis completed for {ticker}")
        return analysis
