import pytest
from fastapi.testclient import TestClient

from conftest import FakeProvider
from tickerscore.api.dependencies import get_ai_analyzer, get_aggregator
from tickerscore.main import app
from tickerscore.services.ai_analyzer import AIAnalyzer
from tickerscore.services.data_aggregator import DataAggregator
from tickerscore.services.llm_service import LLMService
from tickerscore.services.providers import MockFinancialProvider


class BrokenAggregator:
    async def get_data_with_sources(self, ticker):
        raise RuntimeError("upstream exploded")

    async def get_historical_data(self, ticker, timeframe="1Y"):
        raise RuntimeError("history unavailable")


@pytest.fixture
def provider(stock_data, strong_metrics, history):
    return FakeProvider("Primary", stock=stock_data, metrics=strong_metrics, history=history)


@pytest.fixture
def client(settings, cache, provider):
    fallback = MockFinancialProvider()
    aggregator = DataAggregator(providers=[provider, fallback], fallback=fallback, cache=cache, settings=settings)
    app.dependency_overrides[get_aggregator] = lambda: aggregator
    app.dependency_overrides[get_ai_analyzer] = lambda: AIAnalyzer(llm=LLMService())
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_analysis_returns_full_result(client):
    response = client.get("/api/analysis/ACME")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    data = body["data"]
    assert data["ticker"] == "ACME"
    assert data["stock_data"]["price"] == 123.45
    assert data["score"]["overall"] == 87.9
    assert data["score"]["recommendation"] == "BUY"
    assert data["sources"] == {"stock_data": "Primary", "metrics": "Primary"}
    assert data["ai_provider"] == "Template Fallback"
    assert data["is_partial"] is False
    assert data["insights"]["strengths"]
    assert data["processing_time_ms"] >= 0


def test_lowercase_ticker_is_normalized(client, provider):
    response = client.get("/api/analysis/acme")

    assert response.status_code == 200
    assert response.json()["data"]["ticker"] == "ACME"
    assert ("stock", "ACME") in provider.calls


def test_invalid_ticker_rejected_before_fetch(client, provider):
    response = client.get("/api/analysis/TOOLONG")

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Invalid ticker format"}
    assert provider.calls == []


@pytest.mark.parametrize("flag", ["skip_ai", "skipAI"])
def test_skip_ai_returns_partial_result(client, flag):
    response = client.get(f"/api/analysis/ACME?{flag}=true")

    data = response.json()["data"]
    assert data["is_partial"] is True
    assert data["ai_provider"] == "Loading"
    assert data["ai_analysis"]["summary"] == "AI analysis loading..."


def test_analysis_failure_returns_error_envelope():
    app.dependency_overrides[get_aggregator] = lambda: BrokenAggregator()
    app.dependency_overrides[get_ai_analyzer] = lambda: AIAnalyzer(llm=LLMService())
    try:
        response = TestClient(app).get("/api/analysis/ACME")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "upstream exploded"
    assert "processing_time_ms" in body


def test_historical_summary(client):
    response = client.get("/api/historical/ACME?timeframe=1M")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["source"] == "Primary"
    assert data["data_points"] == 3
    assert data["date_range"] == {"start": "2024-06-03", "end": "2024-06-05"}
    assert data["price_range"] == {"min": 9.0, "max": 12.0, "start": 10.5, "end": 9.8}
    assert data["volume_stats"] == {"total": 600, "average": 200.0, "max": 300}


def test_historical_invalid_timeframe(client, provider):
    response = client.get("/api/historical/ACME?timeframe=10Y")

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert provider.calls == []


def test_historical_failure_returns_error_envelope():
    app.dependency_overrides[get_aggregator] = lambda: BrokenAggregator()
    try:
        response = TestClient(app).get("/api/historical/ACME")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json()["error"] == "history unavailable"


def test_debug_reports_coverage(client):
    response = client.get("/api/debug/acme")

    debug = response.json()["debug"]
    assert debug["ticker"] == "ACME"
    assert debug["metrics_available"] == 9
    assert debug["total_metrics"] == 12
    assert debug["coverage"] == "75%"
    assert debug["sources"]["metrics"] == "Primary"


def test_health(client):
    response = client.get("/api/health")

    data = response.json()["data"]
    assert data["status"] == "ok"
    assert data["llm"] == {"configured": False, "model": None}
    assert data["fallback"] == "Template Fallback"
    assert data["cache_entries"] == 0
