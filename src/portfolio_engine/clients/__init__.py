from __future__ import annotations

from .aptos_indexer import AptosIndexerClient
from .panora import PanoraPriceClient, PriceSnapshot

__all__ = ["AptosIndexerClient", "PanoraPriceClient", "PriceSnapshot"]
