"""Error taxonomy shared by the pipeline, the HTTP layer and the CLI."""

from __future__ import annotations


class EngineError(Exception):
    """Base class for errors surfaced to callers.

    Attributes:
        code: Stable machine-readable error code
        status_code: HTTP status used when the error reaches the API layer
    """

    code: str = "engine_error"
    status_code: int = 500

    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def to_dict(self) -> dict[str, str]:
        return {"error": self.code, "message": self.message}


class ValidationError(EngineError, ValueError):
    """Malformed caller input. Never retried."""

    code = "validation_error"
    status_code = 400


class InvalidAddressError(ValidationError):
    """Account address is not 64 hex characters (optionally 0x-prefixed)."""

    code = "invalid_address"


class NoLiquidityError(EngineError):
    """Upstream answered, but no route or output amount exists."""

    code = "no_liquidity"
    status_code = 400


class UpstreamUnavailable(EngineError):
    """An upstream call failed at transport level or returned non-2xx."""

    code = "upstream_unavailable"
    status_code = 502


class InternalError(EngineError):
    """Unexpected failure. The message is logged, never sent to clients."""

    code = "internal_error"
    status_code = 500

    def to_dict(self) -> dict[str, str]:
        return {"error": self.code, "message": "Internal server error"}
