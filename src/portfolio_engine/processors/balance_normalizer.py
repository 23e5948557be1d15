from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from ..domain import Balance, InvalidBalance, RawBalance
from ..tokens import TokenTable
from ..units import MAX_RAW_AMOUNT_DIGITS, from_minimal_units, is_raw_amount


@dataclass
class NormalizedBalances:
    """Normalized balances plus the raw entries that were rejected."""

    balances: list[Balance] = field(default_factory=list)
    invalid: list[InvalidBalance] = field(default_factory=list)


def _rejection_reason(amount: object) -> str:
    if amount is None or amount == "":
        return "missing amount"
    if isinstance(amount, str) and amount.strip().lower() in {"null", "undefined", "nan"}:
        return f"placeholder amount {amount!r}"
    if isinstance(amount, int) and not isinstance(amount, bool):
        if amount < 0:
            return "negative amount"
        return f"amount exceeds {MAX_RAW_AMOUNT_DIGITS} digits"
    if isinstance(amount, str) and amount.isascii() and amount.isdigit():
        return f"amount exceeds {MAX_RAW_AMOUNT_DIGITS} digits"
    return f"not a non-negative integer: {amount!r}"


def normalize(
    raw_balances: Iterable[RawBalance], token_table: TokenTable
) -> NormalizedBalances:
    """Convert raw minimal-unit balances into human-readable quantities.

    Args:
        raw_balances: Indexer rows (asset type + raw amount)
        token_table: Decimals/symbol lookup; unknown assets use 8 decimals

    Returns:
        NormalizedBalances where ``balances`` holds only well-formed entries
        (in input order) and ``invalid`` holds every rejected entry with the
        reason it was rejected.
    """
    result = NormalizedBalances()
    for raw in raw_balances:
        if not is_raw_amount(raw.amount):
            result.invalid.append(
                InvalidBalance(
                    asset_type=raw.asset_type,
                    amount=raw.amount,
                    reason=_rejection_reason(raw.amount),
                )
            )
            continue

        token = token_table.resolve(raw.asset_type)
        raw_amount = str(raw.amount)
        result.balances.append(
            Balance(
                asset_type=raw.asset_type,
                symbol=token.symbol,
                raw_amount=raw_amount,
                decimals=token.decimals,
                normalized_amount=from_minimal_units(raw_amount, token.decimals),
            )
        )
    return result
