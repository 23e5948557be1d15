"""Wallet balance entry point: indexer -> normalizer -> price enricher."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from ..addresses import normalize_account_address
from ..clients.aptos_indexer import AptosIndexerClient
from ..clients.panora import PanoraPriceClient, PriceSnapshot
from ..domain import Balance
from ..errors import UpstreamUnavailable
from ..processors import enrich, normalize, total_value_usd
from ..state import AppState


def _sort_key(balance: Balance) -> tuple[bool, Decimal]:
    # priced balances first, highest value first
    return (balance.usd_value is None, -(balance.usd_value or Decimal(0)))


def price_lookup(snapshot: PriceSnapshot) -> dict[str, Decimal]:
    """Symbol-keyed prices, extended with address keys.

    Tokens missing from the token table use their address as symbol, so the
    address entries let them still pick up a price.
    """
    return {**snapshot.by_address, **snapshot.by_symbol}


async def _fetch_prices(
    state: AppState, asset_types: list[str], diagnostics: list[dict[str, str]]
) -> PriceSnapshot:
    client = PanoraPriceClient(state.settings)
    try:
        return await client.fetch_prices(asset_types)
    except (UpstreamUnavailable, ValueError) as e:
        state.logger.warning("Price fetch failed, returning unpriced balances: %s", e)
        diagnostics.append({"source": "prices", "message": str(e)})
        return PriceSnapshot()


async def get_wallet_balances(state: AppState, address: str) -> dict[str, Any]:
    """Balances of one account with USD values where a price is known.

    Raises:
        InvalidAddressError: If ``address`` is not 64 hex characters
        UpstreamUnavailable: If the indexer cannot be reached
    """
    account = normalize_account_address(address)
    log = state.logger

    raw_balances = await AptosIndexerClient(state.settings).fetch_fungible_asset_balances(
        account
    )
    log.debug("Indexer returned %d balances for %s", len(raw_balances), account)

    diagnostics: list[dict[str, str]] = []
    snapshot = PriceSnapshot()
    if raw_balances:
        snapshot = await _fetch_prices(
            state, sorted({b.asset_type for b in raw_balances}), diagnostics
        )

    tokens = state.tokens.merged(snapshot.tokens)
    normalized = normalize(raw_balances, tokens)
    if normalized.invalid:
        log.warning(
            "Dropped %d malformed balance(s) for %s", len(normalized.invalid), account
        )

    balances = sorted(enrich(normalized.balances, price_lookup(snapshot)), key=_sort_key)
    return {
        "address": account,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "balances": [b.to_dict() for b in balances],
        "invalid": [b.to_dict() for b in normalized.invalid],
        "totalValueUsd": float(total_value_usd(balances)),
        "diagnostics": diagnostics,
    }
