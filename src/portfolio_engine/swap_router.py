"""Routes a swap-quote request to the venue chosen by the caller."""

from __future__ import annotations

from collections.abc import Mapping

from .adapters.quote_adapters import (
    AmountConvention,
    BaseQuoteAdapter,
    QuoteRequest,
    SwapProvider,
    build_quote_adapters,
)
from .adapters.quote_adapters.base import ERROR_NO_LIQUIDITY, ERROR_UPSTREAM
from .domain import SwapQuote
from .errors import InternalError, NoLiquidityError, UpstreamUnavailable, ValidationError
from .logger import get_logger
from .settings import EngineSettings
from .tokens import TokenTable
from .units import (
    DEFAULT_DECIMALS,
    MAX_DECIMALS,
    MAX_RAW_AMOUNT_DIGITS,
    parse_decimal,
    to_minimal_units,
)

logger = get_logger(__name__)

MISSING_FIELDS_MESSAGE = "Missing required fields: fromTokenAddress, toTokenAddress, amount"


def parse_provider(provider: object) -> SwapProvider:
    """
    Raises:
        ValidationError: If ``provider`` is missing or not a known venue
    """
    try:
        return SwapProvider(str(provider).lower())
    except ValueError:
        raise ValidationError(
            "Invalid or missing provider. "
            f"Available: {', '.join(p.value for p in SwapProvider)}"
        ) from None


def slippage_fraction(slippage_percentage: object) -> float:
    """Percent (string or number) to a fraction: ``"1"`` -> ``0.01``.

    Raises:
        ValidationError: If not a finite number in ``[0, 100]``
    """
    try:
        percent = parse_decimal(slippage_percentage)
    except ValueError:
        raise ValidationError(
            f"Invalid slippagePercentage: {slippage_percentage!r}"
        ) from None
    if percent < 0 or percent > 100:
        raise ValidationError(
            f"slippagePercentage must be between 0 and 100, got {slippage_percentage!r}"
        )
    return float(percent / 100)


def resolve_decimals(decimals: object) -> int:
    """Caller-supplied decimals, or 8 when absent or not a non-negative int.

    Raises:
        ValidationError: If an integer above 32 is given
    """
    if isinstance(decimals, bool):
        return DEFAULT_DECIMALS
    if isinstance(decimals, float) and decimals.is_integer():
        decimals = int(decimals)
    if isinstance(decimals, int) and decimals >= 0:
        if decimals > MAX_DECIMALS:
            raise ValidationError(
                f"Invalid decimals value: must be at most {MAX_DECIMALS}, got {decimals}"
            )
        return decimals
    return DEFAULT_DECIMALS


class SwapRouter:
    """Delegates to one quote adapter, converting the amount on the way in.

    Each adapter declares its :class:`AmountConvention`; conversion happens
    here and nowhere else. There is no failover between venues.
    """

    def __init__(
        self,
        config: EngineSettings,
        *,
        adapters: Mapping[SwapProvider, BaseQuoteAdapter] | None = None,
        token_table: TokenTable | None = None,
    ):
        self.config = config
        self.adapters = dict(adapters) if adapters is not None else build_quote_adapters(config)
        self.token_table = token_table or TokenTable.from_settings(config)

    def build_request(
        self,
        convention: AmountConvention,
        from_token: str,
        to_token: str,
        amount: object,
        decimals: object,
        slippage: float,
    ) -> QuoteRequest:
        from_decimals = resolve_decimals(decimals)
        to_decimals = self.token_table.resolve(to_token).decimals

        try:
            human = parse_decimal(amount)
        except ValueError:
            raise ValidationError("Invalid amount value") from None
        # no u256 amount has more integer digits than this
        if human.adjusted() >= MAX_RAW_AMOUNT_DIGITS:
            raise ValidationError("Invalid amount value")

        if convention is AmountConvention.MINIMAL_UNIT:
            minimal = to_minimal_units(human, from_decimals)
            if minimal <= 0:
                raise ValidationError("Invalid amount value")
            venue_amount = str(minimal)
        else:
            if human <= 0:
                raise ValidationError("Invalid amount value")
            venue_amount = format(human, "f")

        return QuoteRequest(
            from_token=from_token,
            to_token=to_token,
            amount=venue_amount,
            slippage=slippage,
            from_decimals=from_decimals,
            to_decimals=to_decimals,
        )

    async def quote(
        self,
        provider: object,
        from_token: str | None,
        to_token: str | None,
        amount: object,
        decimals: object = None,
        slippage_percentage: object = "1",
    ) -> SwapQuote:
        """Get a normalized quote from the named venue.

        Args:
            provider: ``"panora"`` or ``"hyperion"``
            from_token: Asset type sold
            to_token: Asset type bought
            amount: Human-readable amount of ``from_token``
            decimals: Decimals of ``from_token``; 8 if omitted or invalid
            slippage_percentage: Percent, ``"1"`` means 1%

        Returns:
            SwapQuote with minimal-unit ``amount_in``/``amount_out`` strings

        Raises:
            ValidationError: Bad provider, missing fields, bad amount or slippage
            NoLiquidityError: Venue has no route for this pair/amount
            UpstreamUnavailable: Venue unreachable or returned non-2xx
            InternalError: Anything else went wrong inside the adapter
        """
        venue = parse_provider(provider)
        if not from_token or not to_token or amount is None or amount == "":
            raise ValidationError(MISSING_FIELDS_MESSAGE)
        if slippage_percentage is None or slippage_percentage == "":
            slippage_percentage = "1"
        slippage = slippage_fraction(slippage_percentage)

        adapter = self.adapters.get(venue)
        if adapter is None:
            raise ValidationError(f"Provider '{venue.value}' is not configured")

        request = self.build_request(
            adapter.amount_convention, from_token, to_token, amount, decimals, slippage
        )
        logger.info(
            "Quoting %s %s -> %s via %s",
            request.amount,
            from_token,
            to_token,
            adapter.adapter_name,
        )
        result = await adapter.quote(request)

        if result.success and result.data is not None:
            return result.data
        message = result.error or "Failed to get quote"
        if result.error_kind == ERROR_NO_LIQUIDITY:
            raise NoLiquidityError(message)
        if result.error_kind == ERROR_UPSTREAM:
            raise UpstreamUnavailable(message)
        raise InternalError(message)

