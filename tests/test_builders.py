import pytest

from portfolio_engine.builders import AmnisBuilder, EchelonBuilder, get_protocol
from portfolio_engine.builders.base import require_raw_amount
from portfolio_engine.constants import AMNIS_PACKAGE, APT_COIN, ECHELON_PACKAGE
from portfolio_engine.errors import ValidationError


def test_get_protocol_is_case_insensitive():
    assert isinstance(get_protocol("Amnis"), AmnisBuilder)
    assert isinstance(get_protocol("ECHELON"), EchelonBuilder)


def test_get_protocol_unknown():
    with pytest.raises(ValidationError) as exc_info:
        get_protocol("aries")

    assert exc_info.value.code == "unknown_protocol"
    assert "amnis, echelon" in exc_info.value.message


@pytest.mark.parametrize("amount", ["100", 100])
def test_require_raw_amount_accepts_positive_integers(amount):
    assert require_raw_amount(amount) == "100"


@pytest.mark.parametrize("amount", ["0", 0, "-1", "1.5", None, "", True])
def test_require_raw_amount_rejects(amount):
    """Zero, negative and non-integer amounts are rejected."""
    with pytest.raises(ValidationError, match="positive integer"):
        require_raw_amount(amount)


def test_amnis_stake_payload():
    """Amnis deposit should build a stake entry-function payload."""
    payload = AmnisBuilder().build_deposit("100000000", APT_COIN).to_dict()

    assert payload == {
        "type": "entry_function_payload",
        "function": f"{AMNIS_PACKAGE}::stake::stake",
        "typeArguments": [APT_COIN],
        "arguments": ["100000000"],
    }


def test_amnis_unstake_payload():
    payload = AmnisBuilder().build_withdraw("", 5, APT_COIN)

    assert payload.function.endswith("::stake::unstake")
    assert payload.arguments == ["5"]


def test_amnis_claim_payload():
    payload = AmnisBuilder().build_claim_rewards(["1", "2"], [])

    assert payload.function.endswith("::stake::claim_rewards")
    assert payload.type_arguments == []
    assert payload.arguments == [["1", "2"], []]


def test_amnis_claim_needs_positions():
    """Claim without positions should be rejected."""
    with pytest.raises(ValidationError, match="position"):
        AmnisBuilder().build_claim_rewards([], [])


def test_echelon_deposit_only():
    builder = EchelonBuilder()

    payload = builder.build_deposit("1000", "0x1::usdc::USDC")

    assert payload.function == f"{ECHELON_PACKAGE}::lending::deposit"
    assert builder.actions == frozenset({"deposit"})
    with pytest.raises(ValidationError, match="does not support withdraw"):
        builder.build_withdraw("0xm", "1", "0x1::usdc::USDC")
    with pytest.raises(ValidationError, match="does not support claim"):
        builder.build_claim_rewards(["1"], [])


def test_missing_token_rejected():
    with pytest.raises(ValidationError, match="Token type is required"):
        EchelonBuilder().build_deposit("1", "  ")
