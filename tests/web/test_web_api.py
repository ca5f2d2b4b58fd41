"""
Web API 测试
"""

from __future__ import annotations

import httpx
import pytest
from fastapi.testclient import TestClient

from signalscan import __version__
from signalscan.web.app import create_app


@pytest.fixture
def upstream(chart_payload):
    """Mock chart API: RATE is always rate limited, VIX and others return data."""

    requests: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        symbol = request.url.path.rsplit("/", 1)[-1]
        requests.append(symbol)
        if symbol == "RATE":
            return httpx.Response(429)
        if symbol.endswith("VIX"):
            return httpx.Response(200, json=chart_payload([12.0, 14.0, None, 16.0]))
        if symbol == "SHORT":
            return httpx.Response(200, json=chart_payload([1.0, 2.0, 3.0]))
        closes = [100.0 - i for i in range(40)]
        return httpx.Response(200, json=chart_payload(closes))

    handler.requests = requests
    return handler


@pytest.fixture
def client(upstream, fast_config):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(upstream))
    app = create_app(config=fast_config, http_client=http_client)
    with TestClient(app) as test_client:
        yield test_client


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "version": __version__}


def test_analyze_returns_one_result_per_ticker(client: TestClient, upstream) -> None:
    response = client.post("/api/analyze", json={"tickers": ["AAPL", "RATE", "BRK.B", "SHORT"]})

    assert response.status_code == 200
    results = response.json()["results"]
    assert [item["ticker"] for item in results] == ["AAPL", "RATE", "BRK.B", "SHORT"]
    assert results[0]["error"] is None
    assert results[0]["rsi"] == 0.0
    assert results[1]["error"] == "API_RATE_LIMIT"
    assert results[1]["bollinger_position"] == "inside"
    assert results[2]["error"] is None
    assert results[3]["error"] == "Not enough data"
    assert "BRK-B" in upstream.requests
    assert upstream.requests.count("RATE") == 3


def test_analyze_empty_list_rejected(client: TestClient) -> None:
    response = client.post("/api/analyze", json={"tickers": []})

    assert response.status_code == 422


def test_analyze_blank_tickers_rejected(client: TestClient) -> None:
    response = client.post("/api/analyze", json={"tickers": ["  ", ""]})

    assert response.status_code == 400


def test_analyze_missing_body_rejected(client: TestClient) -> None:
    response = client.post("/api/analyze", json={})

    assert response.status_code == 422


def test_fetch(client: TestClient) -> None:
    response = client.post("/api/fetch", json={"tickers": ["AAPL", "RATE"]})

    assert response.status_code == 200
    results = response.json()["results"]
    assert len(results[0]["dates"]) == 40
    assert results[0]["dates"][0] == "2024-01-01"
    assert results[0]["error"] is None
    assert results[1]["error_code"] == "API_RATE_LIMIT"
    assert results[1]["dates"] == []


def test_market_indicators(client: TestClient) -> None:
    response = client.get("/api/market-indicators")

    assert response.status_code == 200
    assert response.json()["vix"] == {"current": 16.0, "fifty_day_avg": 14.0, "rating": "Neutral"}


def test_market_indicators_upstream_failure(fast_config) -> None:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(503)))
    app = create_app(config=fast_config, http_client=http_client)

    with TestClient(app) as test_client:
        response = test_client.get("/api/market-indicators")

    assert response.status_code == 502
    body = response.json()
    assert body["code"] == "HTTP_ERROR"
    assert body["message"] == "API error: HTTP 503"
