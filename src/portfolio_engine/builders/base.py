from __future__ import annotations

from abc import ABC, abstractmethod

from ..domain import TransactionPayload
from ..errors import ValidationError
from ..units import is_raw_amount


def require_raw_amount(amount: object) -> str:
    """Minimal-unit amount as a positive integer string.

    Raises:
        ValidationError: If ``amount`` is not a positive integer
    """
    if not is_raw_amount(amount) or int(amount) <= 0:  # type: ignore[arg-type]
        raise ValidationError(
            f"Amount must be a positive integer in minimal units, got {amount!r}"
        )
    return str(int(amount))  # type: ignore[arg-type]


def require_token(token: object) -> str:
    if not isinstance(token, str) or not token.strip():
        raise ValidationError("Token type is required")
    return token.strip()


class BaseProtocolBuilder(ABC):
    """Builds entry-function payloads for one protocol.

    Only deposit is mandatory; protocols without a withdraw or claim entry
    point keep the default, which rejects the action.
    """

    actions: frozenset[str] = frozenset({"deposit"})

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the display name of this protocol."""
        ...

    @abstractmethod
    def build_deposit(self, amount: object, token: str) -> TransactionPayload:
        ...

    def build_withdraw(
        self, market: str, amount: object, token: str
    ) -> TransactionPayload:
        raise ValidationError(f"{self.name} does not support withdraw")

    def build_claim_rewards(
        self, position_ids: list[str], token_types: list[str]
    ) -> TransactionPayload:
        raise ValidationError(f"{self.name} does not support claim")
