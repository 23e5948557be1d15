"""Swap quote entry point."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..errors import ValidationError
from ..state import AppState


async def get_swap_quote(state: AppState, body: Any) -> dict[str, Any]:
    """Quote a swap described by a request body.

    Body keys: ``provider``, ``fromTokenAddress``, ``toTokenAddress``,
    ``amount``, optional ``decimals`` and ``slippagePercentage`` (default "1").
    """
    if not isinstance(body, Mapping):
        raise ValidationError("Request body must be a JSON object")

    quote = await state.router.quote(
        body.get("provider"),
        body.get("fromTokenAddress"),
        body.get("toTokenAddress"),
        body.get("amount"),
        decimals=body.get("decimals"),
        slippage_percentage=body.get("slippagePercentage", "1"),
    )
    return quote.to_dict()
