from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from portfolio_engine import api
from portfolio_engine.clients.aptos_indexer import AptosIndexerClient
from portfolio_engine.clients.panora import PanoraPriceClient, PriceSnapshot
from portfolio_engine.domain import RawBalance
from portfolio_engine.errors import NoLiquidityError, UpstreamUnavailable

APT = "0x1::aptos_coin::AptosCoin"
USDC = "0xbae207659db88bea0cbead6da0ed00aac12edcdda169e591cd41c94180b46f3b"
ACCOUNT = "0x" + "AB" * 32


@pytest.fixture
def client(state):
    return TestClient(api.create_app(state), raise_server_exceptions=False)


def test_health(client):
    """Health check should report ok."""
    assert client.get("/health").json() == {"status": "ok"}


def test_pools_passes_query(client, monkeypatch):
    """Query parameters are passed through to the pools entry point."""
    seen = {}

    async def fake_collect(state, protocol=None, top=None):
        seen.update(protocol=protocol, top=top)
        return {"success": True, "data": [], "protocols": {}, "failedSources": []}

    monkeypatch.setattr(api, "collect_pools", fake_collect)

    response = client.get("/api/pools", params={"protocol": "Echelon", "top": 3})

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert seen == {"protocol": "Echelon", "top": 3}


def test_pools_rejects_non_positive_top(client):
    """top=0 should return 400."""
    response = client.get("/api/pools", params={"top": 0})

    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"


def test_invalid_wallet_address(client):
    """A short wallet address should return 400."""
    response = client.get("/api/wallet/0x123/balance")

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_address"


@pytest.mark.parametrize("malformed", ["null", "1" * 5000])
def test_wallet_balance_reports_malformed_rows(client, malformed):
    """A bad indexer row is listed under invalid while the good rows are returned."""
    rows = [RawBalance(APT, "150000000"), RawBalance(USDC, malformed)]
    prices = PriceSnapshot(by_symbol={"APT": Decimal("5")})

    with (
        patch.object(
            AptosIndexerClient,
            "fetch_fungible_asset_balances",
            new=AsyncMock(return_value=rows),
        ),
        patch.object(PanoraPriceClient, "fetch_prices", new=AsyncMock(return_value=prices)),
    ):
        response = client.get(f"/api/wallet/{ACCOUNT}/balance")

    assert response.status_code == 200
    body = response.json()
    assert body["address"] == ACCOUNT.lower()
    assert [b["symbol"] for b in body["balances"]] == ["APT"]
    assert body["balances"][0]["usdValue"] == 7.5
    assert [i["assetType"] for i in body["invalid"]] == [USDC]
    assert body["totalValueUsd"] == 7.5


def test_quote_validation_error(client):
    """An unknown provider should return 400 with the router message."""
    response = client.post("/api/swap/quote", json={"provider": "uniswap"})

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "validation_error"
    assert "Invalid or missing provider" in body["message"]


def test_quote_invalid_json(client):
    """A malformed JSON body should return 400."""
    response = client.post(
        "/api/swap/quote",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Request body is not valid JSON"


def test_quote_body_that_is_not_utf8(client):
    """Undecodable request bytes are a client error, not a server error."""
    response = client.post(
        "/api/swap/quote",
        content=b"\xff\xfe{",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Request body is not valid JSON"


def test_quote_with_oversized_decimals(client):
    """Absurd decimals come back as a 400 instead of hanging the conversion."""
    response = client.post(
        "/api/swap/quote",
        json={
            "provider": "hyperion",
            "fromTokenAddress": APT,
            "toTokenAddress": USDC,
            "amount": "1",
            "decimals": 5000,
        },
    )

    assert response.status_code == 400
    assert "Invalid decimals value" in response.json()["message"]


@pytest.mark.parametrize(
    ("error", "status", "code"),
    [
        (NoLiquidityError("No liquidity available"), 400, "no_liquidity"),
        (UpstreamUnavailable("Panora request failed"), 502, "upstream_unavailable"),
    ],
)
def test_quote_error_mapping(client, monkeypatch, error, status, code):
    """Quote failures map to their status codes and error bodies."""
    async def failing(state, body):
        raise error

    monkeypatch.setattr(api, "get_swap_quote", failing)

    response = client.post(
        "/api/swap/quote",
        json={"provider": "panora", "fromTokenAddress": APT, "toTokenAddress": USDC, "amount": "1"},
    )

    assert response.status_code == status
    assert response.json() == {"error": code, "message": error.message}


def test_unexpected_error_is_hidden(client, monkeypatch):
    """Unexpected errors return a generic 500 without internal details."""
    async def broken(state, body):
        raise RuntimeError("secret stack detail")

    monkeypatch.setattr(api, "get_swap_quote", broken)

    response = client.post("/api/swap/quote", json={})

    assert response.status_code == 500
    assert response.json() == {"error": "internal_error", "message": "Internal server error"}


def test_protocol_action(client):
    """Protocol actions return the entry-function payload."""
    response = client.post(
        "/api/protocols/amnis/deposit", json={"amount": "100", "token": APT}
    )

    assert response.status_code == 200
    assert response.json()["function"].endswith("::stake::stake")


def test_protocol_action_unknown_protocol(client):
    """An unknown protocol should return 400."""
    response = client.post("/api/protocols/aries/deposit", json={})

    assert response.status_code == 400
    assert response.json()["error"] == "unknown_protocol"


def test_sources_toggle(client, state):
    """Sources can be disabled and re-enabled over HTTP."""
    listed = client.get("/api/sources").json()["sources"]
    assert [s["name"] for s in listed][:2] == ["Joule", "Aave"]

    response = client.post("/api/sources/Aave/disable")

    assert response.status_code == 200
    assert response.json()["enabled"] is False
    assert state.registry.get("Aave").enabled is False

    client.post("/api/sources/Aave/enable")
    assert state.registry.get("Aave").enabled is True


def test_toggle_unknown_source(client):
    """Toggling an unknown source should return 400."""
    response = client.post("/api/sources/Nope/disable")

    assert response.status_code == 400
    assert response.json()["error"] == "unknown_source"
