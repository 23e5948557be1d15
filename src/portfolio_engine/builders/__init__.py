from __future__ import annotations

from .amnis import AmnisBuilder
from .base import BaseProtocolBuilder
from .echelon import EchelonBuilder
from ..errors import ValidationError

BUILDER_REGISTRY: dict[str, type[BaseProtocolBuilder]] = {
    "amnis": AmnisBuilder,
    "echelon": EchelonBuilder,
}

ACTIONS = ("deposit", "withdraw", "claim")


def get_protocol(protocol: str) -> BaseProtocolBuilder:
    """Get a builder by protocol key.

    Args:
        protocol: Protocol key (case-insensitive)

    Raises:
        ValidationError: If the protocol is not recognized
    """
    key = protocol.lower()
    if key not in BUILDER_REGISTRY:
        raise ValidationError(
            f"Unknown protocol '{protocol}'. "
            f"Available: {', '.join(BUILDER_REGISTRY.keys())}",
            code="unknown_protocol",
        )
    return BUILDER_REGISTRY[key]()


__all__ = [
    "ACTIONS",
    "AmnisBuilder",
    "BUILDER_REGISTRY",
    "BaseProtocolBuilder",
    "EchelonBuilder",
    "get_protocol",
]
