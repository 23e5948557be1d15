from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal

from ..domain import Balance
from ..units import parse_decimal


def enrich(
    balances: Iterable[Balance], prices: Mapping[str, Decimal | float | int | str]
) -> list[Balance]:
    """Attach USD price and value to each balance, joined by symbol.

    Pure function: no network access. A symbol missing from ``prices`` (or
    mapped to a non-numeric value) leaves ``usd_price`` and ``usd_value`` as
    None so callers can tell "price unknown" apart from "worth nothing".
    """
    enriched: list[Balance] = []
    for balance in balances:
        price = prices.get(balance.symbol)
        if price is None:
            enriched.append(balance.with_price(None))
            continue
        try:
            usd_price = parse_decimal(price)
        except ValueError:
            enriched.append(balance.with_price(None))
            continue
        enriched.append(balance.with_price(usd_price))
    return enriched


def total_value_usd(balances: Iterable[Balance]) -> Decimal:
    """Sum of known USD values; unpriced balances contribute nothing."""
    return sum(
        (b.usd_value for b in balances if b.usd_value is not None), Decimal(0)
    )
