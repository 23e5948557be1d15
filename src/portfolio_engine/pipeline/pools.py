"""Pool aggregation entry point."""

from __future__ import annotations

from typing import Any

from ..errors import ValidationError
from ..processors import aggregate, count_protocols, pools_by_protocol, top_pools
from ..state import AppState


async def collect_pools(
    state: AppState, protocol: str | None = None, top: int | None = None
) -> dict[str, Any]:
    """Aggregate pools from every enabled source.

    Always succeeds: sources that fail are listed under ``failedSources``
    and an empty ``data`` list means no data is available right now.

    Args:
        state: Application state
        protocol: Keep only pools of this protocol (case-insensitive)
        top: Keep only the ``top`` highest-APR pools
    """
    if top is not None and top < 1:
        raise ValidationError(f"top must be a positive integer, got {top}")

    sources = state.registry.snapshot()
    result = await aggregate(sources, timeout=state.settings.source_timeout_seconds)

    pools = result.pools
    if protocol:
        pools = pools_by_protocol(pools, protocol)
    if top is not None:
        pools = top_pools(pools, top)

    if result.failures:
        state.logger.warning(
            "%d source(s) failed: %s",
            len(result.failures),
            ", ".join(f.source for f in result.failures),
        )

    return {
        "success": True,
        "data": [p.to_dict() for p in pools],
        "protocols": count_protocols(pools),
        "failedSources": [f.to_dict() for f in result.failures],
    }
