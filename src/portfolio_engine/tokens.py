"""Token reference table."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from .addresses import strip_leading_zeros
from .constants import KNOWN_TOKENS
from .domain import Token
from .settings import EngineSettings
from .units import DEFAULT_DECIMALS


class TokenTable:
    """Immutable address -> Token lookup.

    Unknown addresses resolve to a placeholder token whose symbol is the
    address itself and whose decimals default to 8.
    """

    def __init__(self, tokens: Iterable[Token] = ()):
        self._tokens: dict[str, Token] = {}
        for token in tokens:
            self._tokens[self._key(token.address)] = token

    @staticmethod
    def _key(address: str) -> str:
        return strip_leading_zeros(address.lower())

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Mapping[str, object]]) -> "TokenTable":
        """Build from ``{address: {symbol, decimals, name?}}``."""
        tokens = []
        for address, info in mapping.items():
            symbol = str(info["symbol"])
            tokens.append(
                Token(
                    address=address,
                    symbol=symbol,
                    name=str(info.get("name") or symbol),
                    decimals=int(info.get("decimals", DEFAULT_DECIMALS)),  # type: ignore[arg-type]
                )
            )
        return cls(tokens)

    @classmethod
    def from_settings(cls, config: EngineSettings) -> "TokenTable":
        """Known tokens, overridden by ``extra_tokens`` from the config file."""
        table = cls.from_mapping(KNOWN_TOKENS)
        extra = [
            Token(
                address=address,
                symbol=token.symbol,
                name=token.name or token.symbol,
                decimals=token.decimals,
            )
            for address, token in config.extra_tokens.items()
        ]
        return table.merged(extra)

    def merged(self, tokens: Iterable[Token]) -> "TokenTable":
        """Return a new table with ``tokens`` added (later entries win)."""
        return TokenTable([*self._tokens.values(), *tokens])

    def get(self, address: str) -> Token | None:
        return self._tokens.get(self._key(address))

    def resolve(self, address: str) -> Token:
        token = self.get(address)
        if token is not None:
            return token
        return Token(
            address=address, symbol=address, name=address, decimals=DEFAULT_DECIMALS
        )

    def __contains__(self, address: object) -> bool:
        return isinstance(address, str) and self.get(address) is not None

    def __len__(self) -> int:
        return len(self._tokens)
