from __future__ import annotations

from ..constants import AMNIS_PACKAGE
from ..domain import TransactionPayload
from ..errors import ValidationError
from .base import BaseProtocolBuilder, require_raw_amount, require_token


class AmnisBuilder(BaseProtocolBuilder):
    """Amnis liquid staking: stake APT, unstake, claim rewards."""

    actions = frozenset({"deposit", "withdraw", "claim"})

    @property
    def name(self) -> str:
        return "Amnis Finance"

    def build_deposit(self, amount: object, token: str) -> TransactionPayload:
        return TransactionPayload(
            function=f"{AMNIS_PACKAGE}::stake::stake",
            type_arguments=[require_token(token)],
            arguments=[require_raw_amount(amount)],
        )

    def build_withdraw(
        self, market: str, amount: object, token: str
    ) -> TransactionPayload:
        # single staking contract, the market is not part of the call
        return TransactionPayload(
            function=f"{AMNIS_PACKAGE}::stake::unstake",
            type_arguments=[require_token(token)],
            arguments=[require_raw_amount(amount)],
        )

    def build_claim_rewards(
        self, position_ids: list[str], token_types: list[str]
    ) -> TransactionPayload:
        if not isinstance(position_ids, list) or not position_ids:
            raise ValidationError("At least one position id is required")
        return TransactionPayload(
            function=f"{AMNIS_PACKAGE}::stake::claim_rewards",
            type_arguments=[],
            arguments=[[str(p) for p in position_ids], []],
        )
