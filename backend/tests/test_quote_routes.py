import asyncio

import pytest
from fastapi.testclient import TestClient

from quotedesk.api.routes import get_integration
from quotedesk.config.settings import settings
from quotedesk.errors import UpstreamError
from quotedesk.main import create_app
from quotedesk.providers.integration import MISSING_KEY_MESSAGE, QuoteIntegration


class FakeQuoteClient:
    def __init__(self, quotes: dict | None = None, profiles: dict | None = None) -> None:
        self.quotes = quotes or {}
        self.profiles = profiles or {}
        self.quote_calls: list[str] = []
        self.profile_calls: list[str] = []

    async def quote(self, symbol: str) -> dict:
        self.quote_calls.append(symbol)
        delay, outcome = self.quotes[symbol]
        await asyncio.sleep(delay)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def company_profile(self, symbol: str) -> dict:
        self.profile_calls.append(symbol)
        outcome = self.profiles[symbol]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeRedis:
    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.expirations: dict[str, int] = {}

    async def __aenter__(self) -> "FakeRedis":
        return self

    async def __aexit__(self, *exc_info) -> None:
        return None

    async def get(self, key: str) -> str | None:
        return self.store.get(key)

    async def setex(self, key: str, ttl: int, value: str) -> None:
        self.store[key] = value
        self.expirations[key] = ttl


def build_client(integration: QuoteIntegration) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_integration] = lambda: integration
    return TestClient(app)


@pytest.fixture
def fast_deadlines(monkeypatch):
    monkeypatch.setattr(settings.quotes, "per_item_timeout_seconds", 0.2)
    monkeypatch.setattr(settings.quotes, "batch_timeout_seconds", 0.5)


@pytest.fixture
def fake_redis(monkeypatch) -> FakeRedis:
    fake = FakeRedis()
    monkeypatch.setattr("quotedesk.cache._get_client", lambda: fake)
    return fake


def test_batch_returns_partial_results_with_200(fast_deadlines) -> None:
    upstream = FakeQuoteClient(
        quotes={
            "AAPL": (0.01, {"c": 150, "d": 1, "dp": 0.5}),
            "MSFT": (0.4, {"c": 400}),
            "BADSYM": (0.0, UpstreamError("Not Found", upstream_status=404)),
        }
    )
    client = build_client(QuoteIntegration.available(upstream))

    response = client.post(
        "/api/finnhub/quotes", json={"symbols": ["AAPL", "MSFT", "BADSYM", "AAPL"]}
    )

    assert response.status_code == 200
    assert response.json() == {
        "quotes": [
            {"symbol": "AAPL", "data": {"c": 150.0, "d": 1.0, "dp": 0.5}},
            {"symbol": "MSFT", "error": "Request timeout"},
            {"symbol": "BADSYM", "error": "Not Found"},
        ]
    }
    assert upstream.quote_calls.count("AAPL") == 1


def test_batch_all_failures_is_still_200(fast_deadlines) -> None:
    upstream = FakeQuoteClient(
        quotes={
            "AAA": (0.0, UpstreamError("Not Found")),
            "BBB": (0.0, {"c": 0}),
        }
    )
    client = build_client(QuoteIntegration.available(upstream))

    response = client.post("/api/finnhub/quotes", json={"symbols": ["AAA", "BBB"]})

    assert response.status_code == 200
    assert response.json()["quotes"] == [
        {"symbol": "AAA", "error": "Not Found"},
        {"symbol": "BBB", "error": "No price data available"},
    ]


def test_batch_overall_deadline_returns_504(monkeypatch) -> None:
    monkeypatch.setattr(settings.quotes, "per_item_timeout_seconds", 0.2)
    monkeypatch.setattr(settings.quotes, "batch_timeout_seconds", 0.05)
    upstream = FakeQuoteClient(
        quotes={symbol: (0.3, {"c": 10}) for symbol in ["AAPL", "MSFT", "BADSYM"]}
    )
    client = build_client(QuoteIntegration.available(upstream))

    response = client.post(
        "/api/finnhub/quotes", json={"symbols": ["AAPL", "MSFT", "BADSYM"]}
    )

    assert response.status_code == 504
    body = response.json()
    assert body["error"] == "Request timeout"
    assert body["quotes"] == [
        {"symbol": "AAPL", "error": "Request timeout"},
        {"symbol": "MSFT", "error": "Request timeout"},
        {"symbol": "BADSYM", "error": "Request timeout"},
    ]


@pytest.mark.parametrize(
    "payload",
    [{}, {"symbols": []}, {"symbols": "AAPL"}, {"symbols": ["AAPL", 3]}, ["AAPL"]],
)
def test_batch_rejects_missing_or_malformed_symbols(payload) -> None:
    upstream = FakeQuoteClient()
    client = build_client(QuoteIntegration.available(upstream))

    response = client.post("/api/finnhub/quotes", json=payload)

    assert response.status_code == 400
    assert "error" in response.json()
    assert upstream.quote_calls == []


@pytest.mark.parametrize("content", [b'{"symbols": ["AAPL",', b"", b"symbols=AAPL"])
def test_batch_rejects_unparseable_body_with_400(content) -> None:
    upstream = FakeQuoteClient()
    client = build_client(QuoteIntegration.available(upstream))

    response = client.post(
        "/api/finnhub/quotes",
        content=content,
        headers={"content-type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Symbols array is required"}
    assert upstream.quote_calls == []


def test_batch_without_integration_returns_503() -> None:
    client = build_client(QuoteIntegration.unavailable(MISSING_KEY_MESSAGE))

    response = client.post("/api/finnhub/quotes", json={"symbols": ["AAPL", "MSFT"]})

    assert response.status_code == 503
    assert response.json() == {
        "error": "Finnhub API key not configured",
        "quotes": [
            {"symbol": "AAPL", "error": "API key not configured"},
            {"symbol": "MSFT", "error": "API key not configured"},
        ],
    }


def test_single_quote_returns_normalized_payload(fast_deadlines) -> None:
    upstream = FakeQuoteClient(
        quotes={"AAPL": (0.0, {"c": 150, "d": 1, "dp": 0.5, "pc": 149, "x": "ignored"})}
    )
    client = build_client(QuoteIntegration.available(upstream))

    response = client.get("/api/finnhub/quote/AAPL")

    assert response.status_code == 200
    assert response.json() == {"c": 150.0, "d": 1.0, "dp": 0.5, "pc": 149.0}


def test_single_quote_failure_returns_500(fast_deadlines) -> None:
    upstream = FakeQuoteClient(quotes={"AAPL": (0.0, UpstreamError("Too Many Requests"))})
    client = build_client(QuoteIntegration.available(upstream))

    response = client.get("/api/finnhub/quote/AAPL")

    assert response.status_code == 500
    assert response.json() == {
        "error": "Failed to fetch quote",
        "details": "Too Many Requests",
    }


def test_single_quote_blank_symbol_returns_400() -> None:
    client = build_client(QuoteIntegration.available(FakeQuoteClient()))

    response = client.get("/api/finnhub/quote/%20")

    assert response.status_code == 400
    assert response.json() == {"error": "Symbol is required"}


def test_single_quote_without_integration_returns_503() -> None:
    client = build_client(QuoteIntegration.unavailable(MISSING_KEY_MESSAGE))

    response = client.get("/api/finnhub/quote/AAPL")

    assert response.status_code == 503
    assert response.json() == {"error": "Finnhub API key not configured"}


def test_profile_is_fetched_once_then_served_from_cache(fake_redis) -> None:
    profile = {"name": "Apple Inc", "ticker": "AAPL", "exchange": "NASDAQ"}
    upstream = FakeQuoteClient(profiles={"AAPL": profile})
    client = build_client(QuoteIntegration.available(upstream))

    first = client.get("/api/finnhub/profile/AAPL")
    second = client.get("/api/finnhub/profile/AAPL")

    assert first.json() == profile
    assert second.json() == profile
    assert upstream.profile_calls == ["AAPL"]
    assert fake_redis.expirations["finnhub:profile:AAPL"] == settings.profile_cache_ttl_seconds


def test_profile_upstream_failure_returns_500(fake_redis) -> None:
    upstream = FakeQuoteClient(profiles={"AAPL": UpstreamError("Internal Server Error")})
    client = build_client(QuoteIntegration.available(upstream))

    response = client.get("/api/finnhub/profile/AAPL")

    assert response.status_code == 500
    assert response.json() == {
        "error": "Failed to fetch profile",
        "details": "Internal Server Error",
    }
    assert fake_redis.store == {}


def test_seed_endpoints_and_health() -> None:
    client = build_client(QuoteIntegration.unavailable(MISSING_KEY_MESSAGE))

    holdings = client.get("/allHoldings").json()["allHoldings"]
    watchlist = client.get("/watchlist").json()["watchlist"]
    health = client.get("/health").json()

    assert holdings[0]["name"] == "AAPL"
    assert "isLoss" in holdings[0]
    assert "isDown" in watchlist[0]
    assert health == {"status": "ok", "finnhub": "unavailable"}
