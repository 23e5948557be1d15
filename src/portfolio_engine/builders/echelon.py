from __future__ import annotations

from ..constants import ECHELON_PACKAGE
from ..domain import TransactionPayload
from .base import BaseProtocolBuilder, require_raw_amount, require_token


class EchelonBuilder(BaseProtocolBuilder):
    """Echelon lending. Only supplying is wired up."""

    @property
    def name(self) -> str:
        return "Echelon"

    def build_deposit(self, amount: object, token: str) -> TransactionPayload:
        return TransactionPayload(
            function=f"{ECHELON_PACKAGE}::lending::deposit",
            type_arguments=[require_token(token)],
            arguments=[require_raw_amount(amount)],
        )
