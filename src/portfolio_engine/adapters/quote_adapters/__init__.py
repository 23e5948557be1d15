from __future__ import annotations

from ...settings import EngineSettings
from .base import (
    AmountConvention,
    BaseQuoteAdapter,
    QuoteAttempt,
    QuoteRequest,
    QuoteResult,
    QuoteState,
    SwapProvider,
)
from .hyperion import HyperionQuoteAdapter
from .panora import PanoraQuoteAdapter

QUOTE_ADAPTERS: dict[SwapProvider, type[BaseQuoteAdapter]] = {
    SwapProvider.PANORA: PanoraQuoteAdapter,
    SwapProvider.HYPERION: HyperionQuoteAdapter,
}


def build_quote_adapters(config: EngineSettings) -> dict[SwapProvider, BaseQuoteAdapter]:
    """One adapter instance per venue, sharing the engine settings."""
    return {provider: cls(config) for provider, cls in QUOTE_ADAPTERS.items()}


__all__ = [
    "QUOTE_ADAPTERS",
    "AmountConvention",
    "BaseQuoteAdapter",
    "HyperionQuoteAdapter",
    "PanoraQuoteAdapter",
    "QuoteAttempt",
    "QuoteRequest",
    "QuoteResult",
    "QuoteState",
    "SwapProvider",
    "build_quote_adapters",
]
