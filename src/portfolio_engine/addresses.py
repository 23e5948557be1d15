"""Aptos address helpers."""

from __future__ import annotations

import re

from .errors import InvalidAddressError

_ACCOUNT_ADDRESS_RE = re.compile(r"[0-9a-fA-F]{64}")


def normalize_account_address(address: str) -> str:
    """Validate a full-length account address and return it as lowercase 0x-hex.

    Args:
        address: 64 hex characters, with or without a ``0x`` prefix

    Raises:
        InvalidAddressError: If the address is not exactly 64 hex characters
    """
    if not isinstance(address, str):
        raise InvalidAddressError(f"Invalid address: {address!r}")
    body = address[2:] if address.startswith("0x") else address
    if _ACCOUNT_ADDRESS_RE.fullmatch(body) is None:
        raise InvalidAddressError(f"Invalid address: {address}")
    return "0x" + body.lower()


def strip_leading_zeros(address: str) -> str:
    """Drop leading zeros after the 0x prefix (``0x0005ab`` -> ``0x5ab``).

    Only the account part before a ``::`` module path is touched. Strings not
    starting with 0x are returned unchanged.
    """
    if not address or not address.startswith("0x"):
        return address
    account, sep, rest = address.partition("::")
    stripped = "0x" + account[2:].lstrip("0")
    if stripped == "0x":
        stripped = "0x0"
    return f"{stripped}{sep}{rest}"


def addresses_equal(first: str, second: str) -> bool:
    return strip_leading_zeros(first.lower()) == strip_leading_zeros(second.lower())
