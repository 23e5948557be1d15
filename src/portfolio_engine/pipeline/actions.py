"""Protocol action payload entry point."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..builders import ACTIONS, get_protocol
from ..errors import ValidationError


def _string_list(value: Any, field_name: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValidationError(f"'{field_name}' must be a list")
    return [str(v) for v in value]


def build_action(protocol: str, action: str, params: Any) -> dict[str, Any]:
    """Build the entry-function payload for ``protocol``/``action``.

    Params by action:
        deposit: ``amount``, ``token``
        withdraw: ``marketAddress``, ``amount``, ``token``
        claim: ``positionIds``, ``tokenTypes``

    Raises:
        ValidationError: Unknown protocol or action, unsupported action for
            this protocol, or missing/malformed params
    """
    if action not in ACTIONS:
        raise ValidationError(
            f"Unknown action '{action}'. Available: {', '.join(ACTIONS)}"
        )
    if not isinstance(params, Mapping):
        raise ValidationError("Request body must be a JSON object")

    builder = get_protocol(protocol)
    if action not in builder.actions:
        raise ValidationError(f"{builder.name} does not support {action}")

    if action == "deposit":
        payload = builder.build_deposit(params.get("amount"), params.get("token"))
    elif action == "withdraw":
        market = params.get("marketAddress")
        if not market:
            raise ValidationError("Market address, amount and token are required")
        payload = builder.build_withdraw(market, params.get("amount"), params.get("token"))
    else:
        payload = builder.build_claim_rewards(
            _string_list(params.get("positionIds"), "positionIds"),
            _string_list(params.get("tokenTypes"), "tokenTypes"),
        )
    return payload.to_dict()
