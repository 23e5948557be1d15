from __future__ import annotations

import pytest

from portfolio_engine.addresses import (
    addresses_equal,
    normalize_account_address,
    strip_leading_zeros,
)
from portfolio_engine.errors import InvalidAddressError

ADDRESS = "0x" + "Ab" * 32


def test_normalize_lowercases_and_prefixes():
    assert normalize_account_address(ADDRESS) == "0x" + "ab" * 32
    assert normalize_account_address(ADDRESS[2:]) == "0x" + "ab" * 32


@pytest.mark.parametrize(
    "address",
    ["", "0x", "0x1234", "0x" + "a" * 63, "0x" + "a" * 65, "0x" + "g" * 64, "a" * 66],
)
def test_normalize_rejects_malformed(address):
    """Anything but 64 hex characters is an invalid address."""
    with pytest.raises(InvalidAddressError) as exc_info:
        normalize_account_address(address)
    assert exc_info.value.status_code == 400
    assert exc_info.value.code == "invalid_address"


def test_normalize_rejects_non_string():
    with pytest.raises(InvalidAddressError):
        normalize_account_address(None)  # type: ignore[arg-type]


def test_strip_leading_zeros():
    assert strip_leading_zeros("0x0005ab") == "0x5ab"
    assert strip_leading_zeros("0x" + "0" * 63 + "a") == "0xa"
    assert strip_leading_zeros("0x000") == "0x0"
    assert strip_leading_zeros("not-an-address") == "not-an-address"


def test_strip_leading_zeros_only_touches_account_part():
    """Module paths after the account are left as they are."""
    assert (
        strip_leading_zeros("0x01::aptos_coin::AptosCoin") == "0x1::aptos_coin::AptosCoin"
    )


def test_addresses_equal_ignores_case_and_padding():
    assert addresses_equal("0x05AB", "0x5ab")
    assert not addresses_equal("0x5ab", "0x5ac")
