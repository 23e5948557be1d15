import pytest

from portfolio_engine.adapters.quote_adapters import (
    AmountConvention,
    BaseQuoteAdapter,
    QuoteRequest,
    SwapProvider,
)
from portfolio_engine.domain import SwapQuote
from portfolio_engine.errors import (
    InternalError,
    NoLiquidityError,
    UpstreamUnavailable,
    ValidationError,
)
from portfolio_engine.swap_router import SwapRouter, slippage_fraction

APT = "0x1::aptos_coin::AptosCoin"
USDC = "0xbae207659db88bea0cbead6da0ed00aac12edcdda169e591cd41c94180b46f3b"


class RecordingAdapter(BaseQuoteAdapter):
    """Captures the request it was given and replays a canned outcome."""

    def __init__(self, config, convention, outcome=None):
        super().__init__(config)
        self.amount_convention = convention
        self.outcome = outcome
        self.requests: list[QuoteRequest] = []

    @property
    def adapter_name(self) -> str:
        return f"fake-{self.amount_convention.value}"

    async def fetch_quote(self, request: QuoteRequest) -> SwapQuote:
        self.requests.append(request)
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return SwapQuote(
            provider="fake",
            amount_in=request.amount,
            amount_out="42",
            path=[request.from_token, request.to_token],
            slippage=request.slippage,
        )


@pytest.fixture
def adapters(settings):
    return {
        SwapProvider.HYPERION: RecordingAdapter(settings, AmountConvention.MINIMAL_UNIT),
        SwapProvider.PANORA: RecordingAdapter(settings, AmountConvention.HUMAN_READABLE),
    }


@pytest.fixture
def router(settings, adapters):
    return SwapRouter(settings, adapters=adapters)


@pytest.mark.asyncio
async def test_minimal_unit_venue_receives_scaled_amount(router, adapters):
    """Minimal-unit venues receive the amount scaled by the source decimals."""
    await router.quote("hyperion", USDC, APT, "1.5", decimals=6)

    (request,) = adapters[SwapProvider.HYPERION].requests
    assert request.amount == "1500000"
    assert request.from_decimals == 6
    assert request.to_decimals == 8


@pytest.mark.asyncio
async def test_human_readable_venue_receives_amount_unchanged(router, adapters):
    """Human-readable venues receive the amount as given."""
    await router.quote("PANORA", APT, USDC, "1.5")

    (request,) = adapters[SwapProvider.PANORA].requests
    assert request.amount == "1.5"
    assert request.to_decimals == 6


@pytest.mark.asyncio
async def test_decimals_default_to_eight(router, adapters):
    """Invalid decimals fall back to 8."""
    await router.quote("hyperion", APT, USDC, 2, decimals="six")

    assert adapters[SwapProvider.HYPERION].requests[0].amount == "200000000"


@pytest.mark.asyncio
@pytest.mark.parametrize("provider", ["panora", "hyperion"])
async def test_slippage_percent_becomes_fraction(router, adapters, provider):
    """Slippage is given in percent and stored as a fraction."""
    quote = await router.quote(provider, APT, USDC, "1", slippage_percentage="1")

    assert quote.slippage == 0.01
    assert adapters[SwapProvider(provider)].requests[0].slippage == 0.01


@pytest.mark.asyncio
async def test_empty_slippage_uses_default(router):
    """An empty slippage falls back to 1%."""
    quote = await router.quote("panora", APT, USDC, "1", slippage_percentage="")

    assert quote.slippage == 0.01


@pytest.mark.asyncio
@pytest.mark.parametrize("provider", [None, "", "uniswap"])
async def test_invalid_provider(router, provider):
    """Missing or unknown providers are rejected."""
    with pytest.raises(ValidationError, match="Invalid or missing provider"):
        await router.quote(provider, APT, USDC, "1")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("from_token", "to_token", "amount"),
    [(None, USDC, "1"), (APT, "", "1"), (APT, USDC, None), (APT, USDC, "")],
)
async def test_missing_fields(router, from_token, to_token, amount):
    """Missing tokens or amount are rejected."""
    with pytest.raises(ValidationError, match="Missing required fields"):
        await router.quote("panora", from_token, to_token, amount)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("provider", "amount"),
    [
        ("panora", "0"),
        ("panora", "-1"),
        ("panora", "abc"),
        ("hyperion", "0"),
        ("hyperion", "-1"),
        ("hyperion", "abc"),
        ("hyperion", "0.000000001"),
    ],
)
async def test_invalid_amounts(router, adapters, provider, amount):
    """Non-positive or unparseable amounts never reach the venue."""
    with pytest.raises(ValidationError, match="Invalid amount value"):
        await router.quote(provider, APT, USDC, amount)

    assert adapters[SwapProvider(provider)].requests == []


@pytest.mark.asyncio
@pytest.mark.parametrize("provider", ["panora", "hyperion"])
@pytest.mark.parametrize("amount", ["1e5000", "1" + "0" * 78])
async def test_oversized_amounts_are_rejected(router, adapters, provider, amount):
    """Amounts wider than any on-chain integer are rejected before conversion."""
    with pytest.raises(ValidationError, match="Invalid amount value"):
        await router.quote(provider, APT, USDC, amount)

    assert adapters[SwapProvider(provider)].requests == []


@pytest.mark.asyncio
@pytest.mark.parametrize("decimals", [33, 5000, 1e300])
async def test_oversized_decimals_are_rejected(router, adapters, decimals):
    """Decimals above 32 are a client error, not a huge power of ten."""
    with pytest.raises(ValidationError, match="Invalid decimals value"):
        await router.quote("hyperion", APT, USDC, "1", decimals=decimals)

    assert adapters[SwapProvider.HYPERION].requests == []


@pytest.mark.asyncio
async def test_negative_decimals_fall_back_to_default(router, adapters):
    """Negative decimals are ignored in favour of the default of 8."""
    await router.quote("hyperion", APT, USDC, "1", decimals=-3)

    assert adapters[SwapProvider.HYPERION].requests[0].amount == "100000000"


@pytest.mark.asyncio
@pytest.mark.parametrize("slippage", ["-1", "101", "lots"])
async def test_invalid_slippage(router, slippage):
    """Slippage outside 0..100 or non-numeric is rejected."""
    with pytest.raises(ValidationError):
        await router.quote("panora", APT, USDC, "1", slippage_percentage=slippage)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("outcome", "expected"),
    [
        (NoLiquidityError("No liquidity available"), NoLiquidityError),
        (UpstreamUnavailable("Panora request failed"), UpstreamUnavailable),
        (KeyError("quotes"), InternalError),
    ],
)
async def test_adapter_failures_map_to_errors(settings, outcome, expected):
    """Adapter failure kinds map to engine error types."""
    adapter = RecordingAdapter(settings, AmountConvention.HUMAN_READABLE, outcome)
    router = SwapRouter(settings, adapters={SwapProvider.PANORA: adapter})

    with pytest.raises(expected):
        await router.quote("panora", APT, USDC, "1")


@pytest.mark.asyncio
async def test_unconfigured_provider(settings):
    """A known provider without an adapter is rejected."""
    router = SwapRouter(settings, adapters={})

    with pytest.raises(ValidationError, match="not configured"):
        await router.quote("hyperion", APT, USDC, "1")


def test_slippage_fraction():
    """Percent values convert to fractions."""
    assert slippage_fraction("0.5") == 0.005
    assert slippage_fraction(2) == 0.02
    assert slippage_fraction("0") == 0.0
