from __future__ import annotations

from typing import Any

from ...domain import SwapQuote
from ...errors import NoLiquidityError, UpstreamUnavailable
from ...units import parse_decimal, to_minimal_units
from ...clients.http import request_json_or_raise
from .base import AmountConvention, BaseQuoteAdapter, QuoteRequest, SwapProvider

SWAP_INFO_QUERY = """
query getSwapInfo($amount: String!, $from: String!, $to: String!, $safeMode: Boolean, $flag: String!) {
  api {
    getSwapInfo(amount: $amount, from: $from, to: $to, safeMode: $safeMode, flag: $flag) {
      amountIn
      amountOut
      path
    }
  }
}
"""


def _swap_info(body: Any) -> dict[str, Any]:
    if not isinstance(body, dict):
        raise ValueError(f"Unexpected Hyperion response: {body!r}")
    if body.get("errors"):
        raise UpstreamUnavailable(f"Hyperion GraphQL error: {body['errors']}")
    data = body.get("data") or {}
    info = (data.get("api") or {}).get("getSwapInfo") or data.get("getSwapInfo")
    return info if isinstance(info, dict) else {}


class HyperionQuoteAdapter(BaseQuoteAdapter):
    """Hyperion CLMM quotes. Amounts are minimal units both ways."""

    amount_convention = AmountConvention.MINIMAL_UNIT

    @property
    def adapter_name(self) -> str:
        return "Hyperion"

    def build_variables(self, request: QuoteRequest) -> dict[str, Any]:
        return {
            "amount": request.amount,
            "from": request.from_token,
            "to": request.to_token,
            "safeMode": True,
            "flag": "in",
        }

    async def fetch_quote(self, request: QuoteRequest) -> SwapQuote:
        body = await request_json_or_raise(
            "POST",
            self.config.hyperion_api_url,
            timeout=self.config.quote_timeout_seconds,
            upstream="Hyperion",
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            json_body={
                "query": SWAP_INFO_QUERY,
                "variables": self.build_variables(request),
            },
        )
        info = _swap_info(body)

        amount_out = info.get("amountOut")
        try:
            out = parse_decimal(amount_out)
        except ValueError:
            raise NoLiquidityError("No liquidity available") from None
        if out <= 0:
            raise NoLiquidityError("No liquidity available")

        return SwapQuote(
            provider=SwapProvider.HYPERION.value,
            amount_in=request.amount,
            amount_out=str(to_minimal_units(out, 0)),
            path=[str(p) for p in info.get("path") or []],
            slippage=request.slippage,
        )
