"""HTTP surface over the pipeline entry points."""

from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .errors import EngineError, InternalError, ValidationError
from .logger import get_logger
from .pipeline import build_action, collect_pools, get_swap_quote, get_wallet_balances
from .state import AppState

logger = get_logger(__name__)


async def _json_body(request: Request) -> Any:
    raw = await request.body()
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except ValueError:
        raise ValidationError("Request body is not valid JSON") from None


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(EngineError)
    async def engine_error_handler(request: Request, exc: EngineError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}"
            for err in exc.errors()
        )
        error = ValidationError(details or "Invalid request")
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        error = InternalError(str(exc))
        return JSONResponse(status_code=error.status_code, content=error.to_dict())


def _build_router(state: AppState) -> APIRouter:
    router = APIRouter(prefix="/api")

    @router.get("/pools")
    async def pools(
        protocol: str | None = Query(default=None),
        top: int | None = Query(default=None, ge=1),
    ) -> dict[str, Any]:
        return await collect_pools(state, protocol=protocol, top=top)

    @router.get("/wallet/{address}/balance")
    async def wallet_balance(address: str) -> dict[str, Any]:
        return await get_wallet_balances(state, address)

    @router.post("/swap/quote")
    async def swap_quote(request: Request) -> dict[str, Any]:
        return await get_swap_quote(state, await _json_body(request))

    @router.post("/protocols/{protocol}/{action}")
    async def protocol_action(protocol: str, action: str, request: Request) -> dict[str, Any]:
        return build_action(protocol, action, await _json_body(request))

    @router.get("/sources")
    async def sources() -> dict[str, Any]:
        return {"sources": [s.to_dict() for s in state.registry.snapshot()]}

    @router.post("/sources/{name}/enable")
    async def enable_source(name: str) -> dict[str, Any]:
        return state.registry.set_enabled(name, True).to_dict()

    @router.post("/sources/{name}/disable")
    async def disable_source(name: str) -> dict[str, Any]:
        return state.registry.set_enabled(name, False).to_dict()

    return router


def create_app(state: AppState) -> FastAPI:
    """Build the FastAPI application bound to one AppState."""
    app = FastAPI(title="Portfolio Engine", docs_url=None, redoc_url=None)
    _register_error_handlers(app)
    app.include_router(_build_router(state))

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app
