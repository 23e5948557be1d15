from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

import backoff
import requests

from ..addresses import strip_leading_zeros
from ..domain import Token
from ..errors import UpstreamUnavailable
from ..logger import get_logger
from ..settings import EngineSettings
from ..units import MAX_DECIMALS, parse_decimal
from .http import is_permanent_http_error, request_json

logger = get_logger(__name__)


def _token_decimals(value: Any) -> int | None:
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        return None
    try:
        decimals = int(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return decimals if 0 <= decimals <= MAX_DECIMALS else None


@dataclass
class PriceSnapshot:
    """Prices from one fetch, shared by every balance in an aggregation pass."""

    by_symbol: dict[str, Decimal] = field(default_factory=dict)
    by_address: dict[str, Decimal] = field(default_factory=dict)
    tokens: list[Token] = field(default_factory=list)


def build_price_snapshot(entries: list[dict[str, Any]]) -> PriceSnapshot:
    """Index Panora price rows by symbol and by address.

    Each address is stored both as returned and with leading zeros stripped,
    so ``0x05ab...`` and ``0x5ab...`` resolve to the same price. Rows with a
    missing or non-numeric ``usdPrice`` are skipped. Token metadata is only
    taken from rows whose ``decimals`` is an integer in ``[0, 32]``; the price
    itself is kept either way. When two rows share a symbol the first one wins.
    """
    snapshot = PriceSnapshot()
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        try:
            price = parse_decimal(entry.get("usdPrice"))
        except ValueError:
            logger.debug("Skipping price row without usable usdPrice: %s", entry)
            continue

        symbol = entry.get("symbol")
        decimals = _token_decimals(entry.get("decimals"))
        if symbol:
            snapshot.by_symbol.setdefault(symbol, price)

        for key in ("tokenAddress", "faAddress"):
            address = entry.get(key)
            if not address:
                continue
            snapshot.by_address[address] = price
            snapshot.by_address[strip_leading_zeros(address)] = price
            if symbol and decimals is not None:
                snapshot.tokens.append(
                    Token(
                        address=address,
                        symbol=symbol,
                        name=entry.get("name") or symbol,
                        decimals=decimals,
                    )
                )
    return snapshot


class PanoraPriceClient:
    """Client for the Panora token price API."""

    def __init__(self, config: EngineSettings):
        self.url = f"{config.panora_api_url.rstrip('/')}/prices"
        self.timeout = config.balance_timeout_seconds
        self.max_tries = config.max_tries
        self._headers = {"Accept": "application/json", **config.panora_auth_headers}

    async def _get_prices(self, params: dict[str, str]) -> Any:
        @backoff.on_exception(
            backoff.expo,
            requests.exceptions.RequestException,
            max_tries=self.max_tries,
            giveup=is_permanent_http_error,
            jitter=backoff.full_jitter,
        )
        async def _do() -> Any:
            return await request_json(
                "GET",
                self.url,
                timeout=self.timeout,
                headers=self._headers,
                params=params,
            )

        return await _do()

    async def fetch_prices(self, token_addresses: list[str] | None = None) -> PriceSnapshot:
        """Fetch USD prices in a single request.

        Args:
            token_addresses: Restrict the lookup to these assets; all listed
                tokens when omitted.

        Raises:
            UpstreamUnavailable: If Panora cannot be reached after retries
            ValueError: If the response is not a list of price rows
        """
        params: dict[str, str] = {}
        if token_addresses:
            params["tokenAddress"] = ",".join(token_addresses)

        try:
            body = await self._get_prices(params)
        except requests.exceptions.RequestException as e:
            raise UpstreamUnavailable(f"Panora price request failed: {e}") from e

        if isinstance(body, dict):
            body = body.get("data", body)
        if not isinstance(body, list):
            raise ValueError(f"Invalid Panora price response: {body!r}")

        snapshot = build_price_snapshot(body)
        logger.debug(
            "Fetched %d symbol prices (%d addresses)",
            len(snapshot.by_symbol),
            len(snapshot.by_address),
        )
        return snapshot
