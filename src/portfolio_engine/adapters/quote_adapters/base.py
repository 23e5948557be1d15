from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum

import requests

from ...domain import SwapQuote
from ...errors import NoLiquidityError, UpstreamUnavailable
from ...logger import get_logger
from ...settings import EngineSettings

logger = get_logger(__name__)

ERROR_NO_LIQUIDITY = "no_liquidity"
ERROR_UPSTREAM = "upstream"
ERROR_INTERNAL = "internal"


class AmountConvention(str, Enum):
    """How a venue expects the input amount."""

    HUMAN_READABLE = "human_readable"  # decimal string, e.g. "1.5"
    MINIMAL_UNIT = "minimal_unit"  # integer string, e.g. "150000000"


class SwapProvider(str, Enum):
    PANORA = "panora"
    HYPERION = "hyperion"


class QuoteState(str, Enum):
    IDLE = "idle"
    REQUESTED = "requested"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


_TRANSITIONS: dict[QuoteState, set[QuoteState]] = {
    QuoteState.IDLE: {QuoteState.REQUESTED},
    QuoteState.REQUESTED: {QuoteState.SUCCEEDED, QuoteState.FAILED},
    QuoteState.SUCCEEDED: set(),
    QuoteState.FAILED: set(),
}


@dataclass
class QuoteAttempt:
    """Lifecycle of one quote call. Lives for a single request only."""

    state: QuoteState = QuoteState.IDLE
    history: list[QuoteState] = field(default_factory=lambda: [QuoteState.IDLE])

    def advance(self, target: QuoteState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise RuntimeError(
                f"Invalid quote transition {self.state.value} -> {target.value}"
            )
        self.state = target
        self.history.append(target)


@dataclass(frozen=True)
class QuoteRequest:
    """Input handed to an adapter, already in the adapter's amount convention.

    Attributes:
        from_token: Asset type sold
        to_token: Asset type bought
        amount: Decimal string (HUMAN_READABLE) or integer string (MINIMAL_UNIT)
        slippage: Fraction, 0.01 means 1%
        from_decimals: Decimals of ``from_token``
        to_decimals: Decimals of ``to_token``
    """

    from_token: str
    to_token: str
    amount: str
    slippage: float
    from_decimals: int = 8
    to_decimals: int = 8


@dataclass(frozen=True)
class QuoteResult:
    """Uniform adapter outcome; exactly one of ``data``/``error`` is set."""

    success: bool
    state: QuoteState
    data: SwapQuote | None = None
    error: str | None = None
    error_kind: str | None = None


class BaseQuoteAdapter(ABC):
    """Abstract base class for swap venue adapters."""

    amount_convention: AmountConvention

    def __init__(self, config: EngineSettings):
        """Initialize the adapter with configuration.

        Args:
            config: Engine configuration
        """
        self.config = config

    @property
    @abstractmethod
    def adapter_name(self) -> str:
        """Return the name of this adapter."""
        ...

    @abstractmethod
    async def fetch_quote(self, request: QuoteRequest) -> SwapQuote:
        """Call the venue and build a quote with minimal-unit amounts.

        Raises:
            NoLiquidityError: Venue answered without a usable route
            UpstreamUnavailable: Venue could not be reached
        """
        ...

    async def quote(self, request: QuoteRequest) -> QuoteResult:
        """Run one quote attempt and fold every outcome into a QuoteResult."""
        attempt = QuoteAttempt()
        attempt.advance(QuoteState.REQUESTED)
        try:
            data = await self.fetch_quote(request)
        except NoLiquidityError as e:
            return self._failed(attempt, ERROR_NO_LIQUIDITY, e.message)
        except (UpstreamUnavailable, requests.exceptions.RequestException) as e:
            logger.warning("%s quote request failed: %s", self.adapter_name, e)
            return self._failed(attempt, ERROR_UPSTREAM, str(e))
        except Exception as e:
            logger.exception("%s quote failed unexpectedly", self.adapter_name)
            return self._failed(attempt, ERROR_INTERNAL, str(e) or repr(e))

        attempt.advance(QuoteState.SUCCEEDED)
        logger.debug(
            "%s quote %s -> %s: in=%s out=%s",
            self.adapter_name,
            request.from_token,
            request.to_token,
            data.amount_in,
            data.amount_out,
        )
        return QuoteResult(success=True, state=attempt.state, data=data)

    @staticmethod
    def _failed(attempt: QuoteAttempt, kind: str, message: str) -> QuoteResult:
        attempt.advance(QuoteState.FAILED)
        return QuoteResult(
            success=False, state=attempt.state, error=message, error_kind=kind
        )
