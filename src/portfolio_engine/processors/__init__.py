from __future__ import annotations

from .aggregator import (
    AggregationResult,
    SourceFailure,
    aggregate,
    count_protocols,
    pools_by_protocol,
    top_pools,
)
from .balance_normalizer import NormalizedBalances, normalize
from .price_enricher import enrich, total_value_usd

__all__ = [
    "AggregationResult",
    "SourceFailure",
    "aggregate",
    "count_protocols",
    "pools_by_protocol",
    "top_pools",
    "NormalizedBalances",
    "normalize",
    "enrich",
    "total_value_usd",
]
