"""Domain models for the portfolio engine.

All models are request-scoped values; ``to_dict`` returns the camelCase wire
shape used by the HTTP layer and the CLI ``--json`` output.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any


def _json_number(value: Decimal | None) -> float | None:
    return None if value is None else float(value)


@dataclass(frozen=True)
class Token:
    """Reference data for a fungible asset."""

    address: str
    symbol: str
    name: str
    decimals: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "symbol": self.symbol,
            "name": self.name,
            "decimals": self.decimals,
        }


@dataclass(frozen=True)
class RawBalance:
    """Balance row as returned by the indexer (amount in minimal units)."""

    asset_type: str
    amount: Any


@dataclass(frozen=True)
class InvalidBalance:
    """A raw balance excluded from normalized output."""

    asset_type: str
    amount: Any
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "assetType": self.asset_type,
            "amount": self.amount,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class Balance:
    """A normalized balance.

    ``raw_amount`` keeps the exact integer string for transaction math;
    ``normalized_amount`` equals ``raw_amount / 10**decimals``.
    ``usd_price``/``usd_value`` are None when the price is unknown.
    """

    asset_type: str
    symbol: str
    raw_amount: str
    decimals: int
    normalized_amount: Decimal
    usd_price: Decimal | None = None
    usd_value: Decimal | None = None

    def with_price(self, usd_price: Decimal | None) -> "Balance":
        if usd_price is None:
            return replace(self, usd_price=None, usd_value=None)
        return replace(
            self,
            usd_price=usd_price,
            usd_value=self.normalized_amount * usd_price,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "assetType": self.asset_type,
            "symbol": self.symbol,
            "rawAmount": self.raw_amount,
            "decimals": self.decimals,
            "normalizedAmount": float(self.normalized_amount),
            "usdPrice": _json_number(self.usd_price),
            "usdValue": _json_number(self.usd_value),
        }


@dataclass(frozen=True)
class Pool:
    """One (protocol, market) record from a single source."""

    id: str
    protocol: str
    asset: str
    apr: float
    source_name: str
    total_staked: str | None = None
    min_stake: str | None = None
    max_stake: str | None = None
    is_active: bool = True
    token: str | None = None
    pool_type: str | None = None
    deposit_apy: float | None = None
    borrow_apy: float | None = None
    tvl_usd: float | None = None
    daily_volume_usd: float | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "protocol": self.protocol,
            "asset": self.asset,
            "apr": self.apr,
            "totalStaked": self.total_staked,
            "minStake": self.min_stake,
            "maxStake": self.max_stake,
            "isActive": self.is_active,
            "sourceName": self.source_name,
            "token": self.token,
            "poolType": self.pool_type,
            "depositApy": self.deposit_apy,
            "borrowApy": self.borrow_apy,
            "tvlUsd": self.tvl_usd,
            "dailyVolumeUsd": self.daily_volume_usd,
            "extra": dict(self.extra),
        }


@dataclass(frozen=True)
class TransactionPayload:
    """Entry-function payload; opaque to the engine."""

    function: str
    type_arguments: list[str]
    arguments: list[Any]
    type: str = "entry_function_payload"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TransactionPayload":
        return cls(
            function=data["function"],
            type_arguments=list(
                data.get("type_arguments", data.get("typeArguments", []))
            ),
            arguments=list(data.get("arguments", [])),
            type=data.get("type", "entry_function_payload"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "function": self.function,
            "typeArguments": list(self.type_arguments),
            "arguments": list(self.arguments),
        }


@dataclass(frozen=True)
class SwapQuote:
    """Normalized quote. Amounts are minimal-unit integer strings."""

    provider: str
    amount_in: str
    amount_out: str
    path: list[str]
    slippage: float
    transaction_payload: TransactionPayload | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "provider": self.provider,
            "amountIn": self.amount_in,
            "amountOut": self.amount_out,
            "path": list(self.path),
            "slippage": self.slippage,
        }
        if self.transaction_payload is not None:
            data["transactionPayload"] = self.transaction_payload.to_dict()
        return data


__all__ = [
    "Balance",
    "InvalidBalance",
    "Pool",
    "RawBalance",
    "SwapQuote",
    "Token",
    "TransactionPayload",
]
