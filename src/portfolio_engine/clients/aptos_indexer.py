from __future__ import annotations

from typing import Any

import backoff
import requests

from ..domain import RawBalance
from ..errors import UpstreamUnavailable
from ..logger import get_logger
from ..settings import EngineSettings
from .http import is_permanent_http_error, request_json

logger = get_logger(__name__)

FUNGIBLE_ASSET_BALANCES_QUERY = """
query GetAccountBalances($address: String!) {
  current_fungible_asset_balances(
    where: {owner_address: {_eq: $address}, amount: {_gt: "0"}}
  ) {
    asset_type
    amount
    last_transaction_timestamp
  }
}
"""


class AptosIndexerClient:
    """Client for the Aptos indexer GraphQL API."""

    def __init__(self, config: EngineSettings):
        self.url = config.aptos_indexer_url
        self.timeout = config.balance_timeout_seconds
        self.max_tries = config.max_tries
        self._headers = {
            "Content-Type": "application/json",
            **config.aptos_auth_headers,
        }

    async def _post_query(self, query: str, variables: dict[str, Any]) -> Any:
        @backoff.on_exception(
            backoff.expo,
            requests.exceptions.RequestException,
            max_tries=self.max_tries,
            giveup=is_permanent_http_error,
            jitter=backoff.full_jitter,
        )
        async def _do() -> Any:
            return await request_json(
                "POST",
                self.url,
                timeout=self.timeout,
                headers=self._headers,
                json_body={"query": query, "variables": variables},
            )

        return await _do()

    async def fetch_fungible_asset_balances(self, address: str) -> list[RawBalance]:
        """Fetch the non-zero fungible-asset balances owned by ``address``.

        Args:
            address: Normalized 0x-prefixed account address

        Returns:
            Raw balance rows; amounts are passed through unvalidated.

        Raises:
            UpstreamUnavailable: If the indexer cannot be reached, keeps
                failing after retries, or answers without balance data
        """
        try:
            body = await self._post_query(
                FUNGIBLE_ASSET_BALANCES_QUERY, {"address": address}
            )
        except (requests.exceptions.RequestException, ValueError) as e:
            raise UpstreamUnavailable(f"Aptos indexer request failed: {e}") from e

        if not isinstance(body, dict):
            raise UpstreamUnavailable(f"Invalid indexer response: {body!r}")
        if body.get("errors"):
            raise UpstreamUnavailable(f"Indexer returned errors: {body['errors']}")

        rows = (body.get("data") or {}).get("current_fungible_asset_balances")
        if not isinstance(rows, list):
            raise UpstreamUnavailable(
                "Indexer response is missing current_fungible_asset_balances"
            )

        logger.debug("Indexer returned %d balance rows for %s", len(rows), address)
        return [
            RawBalance(asset_type=row.get("asset_type", ""), amount=row.get("amount"))
            for row in rows
            if isinstance(row, dict)
        ]
