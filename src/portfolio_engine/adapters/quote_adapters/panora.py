from __future__ import annotations

from decimal import Decimal
from typing import Any

from ...constants import PANORA_CHAIN_ID, PLACEHOLDER_WALLET_ADDRESS
from ...domain import SwapQuote, TransactionPayload
from ...errors import NoLiquidityError
from ...settings import EngineSettings
from ...units import parse_decimal, to_minimal_units
from ...clients.http import request_json_or_raise
from .base import AmountConvention, BaseQuoteAdapter, QuoteRequest, SwapProvider


def slippage_percentage(slippage: float) -> str:
    """Fraction to the percent string Panora expects (0.005 -> "0.5")."""
    percent = (Decimal(str(slippage)) * 100).normalize()
    return format(percent, "f")


def _token_decimals(token: Any, fallback: int) -> int:
    if isinstance(token, dict) and isinstance(token.get("decimals"), int):
        return token["decimals"]
    return fallback


class PanoraQuoteAdapter(BaseQuoteAdapter):
    """Panora aggregator quotes. Amounts go in and come out human-readable."""

    amount_convention = AmountConvention.HUMAN_READABLE

    def __init__(self, config: EngineSettings):
        super().__init__(config)
        self.url = f"{config.panora_api_url.rstrip('/')}/swap"

    @property
    def adapter_name(self) -> str:
        return "Panora"

    def build_params(self, request: QuoteRequest) -> dict[str, str]:
        return {
            "chainId": PANORA_CHAIN_ID,
            "fromTokenAddress": request.from_token,
            "toTokenAddress": request.to_token,
            "fromTokenAmount": request.amount,
            "toWalletAddress": PLACEHOLDER_WALLET_ADDRESS,
            "slippagePercentage": slippage_percentage(request.slippage),
            "getTransactionData": "transactionPayload",
        }

    async def fetch_quote(self, request: QuoteRequest) -> SwapQuote:
        body = await request_json_or_raise(
            "POST",
            self.url,
            timeout=self.config.quote_timeout_seconds,
            upstream="Panora",
            headers={"Accept": "application/json", **self.config.panora_auth_headers},
            params=self.build_params(request),
        )
        if not isinstance(body, dict):
            raise ValueError(f"Unexpected Panora quote response: {body!r}")

        quotes = body.get("quotes") or []
        if not quotes:
            raise NoLiquidityError("No liquidity available")
        best = quotes[0]

        try:
            to_amount = parse_decimal(best.get("toTokenAmount"))
        except ValueError:
            raise NoLiquidityError("No liquidity available") from None
        if to_amount <= 0:
            raise NoLiquidityError("No liquidity available")

        from_decimals = _token_decimals(body.get("fromToken"), request.from_decimals)
        to_decimals = _token_decimals(body.get("toToken"), request.to_decimals)
        from_amount = body.get("fromTokenAmount") or request.amount

        payload = best.get("transactionPayload")
        path = best.get("path")
        return SwapQuote(
            provider=SwapProvider.PANORA.value,
            amount_in=str(to_minimal_units(from_amount, from_decimals)),
            amount_out=str(to_minimal_units(to_amount, to_decimals)),
            path=(
                [str(p) for p in path]
                if isinstance(path, list)
                else [request.from_token, request.to_token]
            ),
            slippage=request.slippage,
            transaction_payload=(
                TransactionPayload.from_dict(payload)
                if isinstance(payload, dict) and "function" in payload
                else None
            ),
        )
