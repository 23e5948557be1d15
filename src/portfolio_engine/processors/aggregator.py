from __future__ import annotations

import asyncio
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

import requests

from ..adapters.source_adapters import SourceConfig, fetch_source
from ..domain import Pool
from ..logger import get_logger

logger = get_logger(__name__)

FAILURE_UPSTREAM = "upstream_unavailable"
FAILURE_TRANSFORM = "transform_error"
FAILURE_TIMEOUT = "timeout"


@dataclass(frozen=True)
class SourceFailure:
    """Why one source contributed nothing to an aggregation pass."""

    source: str
    kind: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"source": self.source, "kind": self.kind, "message": self.message}


@dataclass
class AggregationResult:
    """Merged pools in source order plus per-source failures."""

    pools: list[Pool] = field(default_factory=list)
    failures: list[SourceFailure] = field(default_factory=list)


def classify_failure(source: str, error: BaseException) -> SourceFailure:
    if isinstance(error, (asyncio.TimeoutError, requests.exceptions.Timeout)):
        kind = FAILURE_TIMEOUT
    elif isinstance(error, requests.exceptions.RequestException):
        kind = FAILURE_UPSTREAM
    else:
        kind = FAILURE_TRANSFORM
    return SourceFailure(source=source, kind=kind, message=str(error) or repr(error))


async def _fetch_bounded(source: SourceConfig, timeout: float) -> list[Pool]:
    # The outer bound covers time spent queued for a worker thread as well.
    async with asyncio.timeout(timeout):
        return await fetch_source(source, timeout=timeout)


async def aggregate(
    sources: Sequence[SourceConfig], *, timeout: float = 8.0
) -> AggregationResult:
    """Fetch every enabled source concurrently and merge the results.

    Args:
        sources: Sources in declaration order (a registry snapshot)
        timeout: Per-source bound in seconds

    Returns:
        AggregationResult whose pools keep source declaration order. A source
        that fails for any reason is logged, recorded in ``failures`` and
        contributes nothing; it never affects the other sources.
    """
    enabled = [s for s in sources if s.enabled]
    skipped = len(sources) - len(enabled)
    if skipped:
        logger.debug("Skipping %d disabled source(s)", skipped)

    tasks = [_fetch_bounded(source, timeout) for source in enabled]
    results: list[Any] = await asyncio.gather(*tasks, return_exceptions=True)

    result = AggregationResult()
    for source, outcome in zip(enabled, results):
        if isinstance(outcome, BaseException):
            # cancellation and interpreter exits are not source failures
            if not isinstance(outcome, Exception):
                raise outcome
            failure = classify_failure(source.name, outcome)
            logger.warning(
                "Source '%s' failed (%s): %s", source.name, failure.kind, failure.message
            )
            result.failures.append(failure)
            continue
        logger.debug("Source '%s' returned %d pools", source.name, len(outcome))
        result.pools.extend(outcome)

    logger.info(
        "Aggregated %d pools from %d/%d sources",
        len(result.pools),
        len(enabled) - len(result.failures),
        len(enabled),
    )
    return result


def pools_by_protocol(pools: Iterable[Pool], protocol: str) -> list[Pool]:
    """Case-insensitive protocol filter."""
    wanted = protocol.casefold()
    return [p for p in pools if p.protocol.casefold() == wanted]


def top_pools(pools: Iterable[Pool], limit: int = 10) -> list[Pool]:
    """Highest APR first; ties keep source order."""
    return sorted(pools, key=lambda p: p.apr, reverse=True)[:limit]


def count_protocols(pools: Iterable[Pool]) -> dict[str, int]:
    return dict(Counter(p.protocol for p in pools))
