from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Union

from ...constants import DEFAULT_SOURCE_HEADERS
from ...domain import Pool
from ...logger import get_logger
from ...clients.http import request_json

logger = get_logger(__name__)

TransformFn = Callable[[Any, str], list[Pool]]


def as_float(value: Any, default: float = 0.0) -> float:
    """Lenient numeric read for optional upstream fields.

    Missing, empty or non-numeric values read as ``default``.
    """
    if value is None or value == "" or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def pool_from_mapping(item: Mapping[str, Any], source_name: str) -> Pool:
    """Build a Pool from an already-normalized upstream record.

    Accepts both the plain pool shape (``id``/``apr``) and the investment
    shape used by the markets API (``token``/``totalAPY``/``provider``).
    """
    if not isinstance(item, Mapping):
        raise TypeError(f"Pool record must be an object, got {type(item).__name__}")

    protocol = item.get("protocol") or item.get("provider") or source_name
    asset = item.get("asset") or "Unknown"
    token = item.get("token") or None
    pool_id = item.get("id") or token or f"{protocol}:{asset}"
    apr = item.get("apr")
    if apr is None:
        apr = item.get("totalAPY")

    total_staked = item.get("totalStaked")
    return Pool(
        id=str(pool_id),
        protocol=str(protocol),
        asset=str(asset),
        apr=as_float(apr),
        source_name=source_name,
        total_staked=None if total_staked is None else str(total_staked),
        min_stake=item.get("minStake"),
        max_stake=item.get("maxStake"),
        is_active=bool(item.get("isActive", True)),
        token=token,
        pool_type=item.get("poolType"),
        deposit_apy=as_float(item["depositApy"]) if "depositApy" in item else None,
        borrow_apy=as_float(item["borrowAPY"]) if "borrowAPY" in item else None,
        tvl_usd=as_float(item["tvlUSD"]) if "tvlUSD" in item else None,
        daily_volume_usd=(
            as_float(item["dailyVolumeUSD"]) if "dailyVolumeUSD" in item else None
        ),
    )


@dataclass(frozen=True)
class DefaultEnvelope:
    """Upstream body is ``{key: [pool, ...]}`` already in pool shape."""

    key: str = "data"

    def apply(self, body: Any, source_name: str) -> list[Pool]:
        if not isinstance(body, Mapping):
            raise TypeError(f"Expected an object envelope, got {type(body).__name__}")
        items = body.get(self.key) or []
        if not isinstance(items, list):
            raise TypeError(f"Envelope field '{self.key}' is not a list")
        return [pool_from_mapping(item, source_name) for item in items]


@dataclass(frozen=True)
class CustomTransform:
    """Provider-specific conversion of the raw body into pools."""

    fn: TransformFn

    def apply(self, body: Any, source_name: str) -> list[Pool]:
        return list(self.fn(body, source_name))


SourceTransform = Union[DefaultEnvelope, CustomTransform]


@dataclass(frozen=True)
class SourceConfig:
    """Static description of one pool data provider."""

    name: str
    url: str
    enabled: bool = True
    transform: SourceTransform = field(default_factory=DefaultEnvelope)
    method: str = "GET"
    body: Any = None
    headers: Mapping[str, str] = field(default_factory=dict)

    def with_enabled(self, enabled: bool) -> "SourceConfig":
        return replace(self, enabled=enabled)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "url": self.url,
            "enabled": self.enabled,
            "method": self.method,
            "transform": (
                "default" if isinstance(self.transform, DefaultEnvelope) else "custom"
            ),
        }


def apply_transform(source: SourceConfig, body: Any) -> list[Pool]:
    """Dispatch on the transform variant."""
    transform = source.transform
    if isinstance(transform, DefaultEnvelope):
        return transform.apply(body, source.name)
    if isinstance(transform, CustomTransform):
        return transform.apply(body, source.name)
    raise TypeError(f"Unsupported transform for source '{source.name}': {transform!r}")


async def fetch_source(source: SourceConfig, *, timeout: float) -> list[Pool]:
    """Fetch one source and convert its body into pools.

    Raises:
        requests.exceptions.RequestException: On transport errors and non-2xx
        ValueError: If the body is not valid JSON
        Exception: Whatever the transform raises on a malformed body
    """
    headers = dict(DEFAULT_SOURCE_HEADERS)
    if source.method.upper() != "GET":
        headers["Content-Type"] = "application/json"
    headers.update(source.headers)

    body = await request_json(
        source.method.upper(),
        source.url,
        timeout=timeout,
        headers=headers,
        json_body=source.body,
    )
    pools = apply_transform(source, body)
    logger.debug("Source '%s' produced %d pools", source.name, len(pools))
    return pools
