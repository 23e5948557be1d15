"""CLI entrypoint for the portfolio engine."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from collections.abc import Coroutine
from pathlib import Path
from typing import Annotated, Any, TypeVar

import typer

from .errors import EngineError
from .logger import setup_logging
from .settings import CONFIG_ENV_VAR, EngineSettings
from .state import AppState

T = TypeVar("T")

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    pretty_exceptions_enable=True,
    pretty_exceptions_short=True,
    pretty_exceptions_show_locals=False,
    rich_markup_mode="rich",
    help="Aggregate Aptos DeFi pools and balances, quote swaps, serve the HTTP API.",
)


def _build_logger() -> logging.Logger:
    """Build a logger instance."""
    return logging.getLogger("portfolio_engine")


def _state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if not isinstance(state, AppState):
        raise RuntimeError("Application state has not been initialised")
    return state


def _run(coro: Coroutine[Any, Any, T]) -> T:
    """Run a pipeline coroutine, turning engine errors into a clean exit."""
    try:
        return asyncio.run(coro)
    except EngineError as e:
        typer.secho(f"{e.code}: {e.message}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from None


def _echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2))


JsonOption = Annotated[
    bool, typer.Option("--json", help="Print the raw JSON response instead of tables.")
]


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to a TOML config file (can include [portfolio_engine] table).",
        ),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help="Override logging verbosity (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL).",
        ),
    ] = None,
    source_timeout: Annotated[
        float | None,
        typer.Option("--source-timeout", help="Per-source timeout in seconds."),
    ] = None,
    show_config: Annotated[
        bool,
        typer.Option(
            "--show-config",
            help="Print effective config (with secrets redacted) and exit.",
        ),
    ] = False,
):
    """Load configuration once and share it with every command."""
    if config_path:
        os.environ[CONFIG_ENV_VAR] = str(config_path)

    init_kwargs: dict[str, Any] = {}
    if log_level is not None:
        init_kwargs["log_level"] = log_level.upper()
    if source_timeout is not None:
        init_kwargs["source_timeout_seconds"] = source_timeout

    settings = EngineSettings(**init_kwargs)
    setup_logging(settings.log_level)

    if show_config:
        _echo_json(settings.as_safe_dict())
        raise typer.Exit(code=0)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)

    ctx.obj = AppState(settings=settings, logger=_build_logger())


@app.command()
def pools(
    ctx: typer.Context,
    protocol: Annotated[
        str | None, typer.Option("--protocol", "-p", help="Only this protocol.")
    ] = None,
    top: Annotated[
        int | None, typer.Option("--top", min=1, help="Only the N highest-APR pools.")
    ] = None,
    as_json: JsonOption = False,
):
    """Aggregate pools from every enabled source."""
    from .formatter import format_pools
    from .pipeline import collect_pools

    response = _run(collect_pools(_state(ctx), protocol=protocol, top=top))
    if as_json:
        _echo_json(response)
    else:
        format_pools(response)


@app.command()
def balances(
    ctx: typer.Context,
    address: Annotated[str, typer.Argument(help="64-hex account address.")],
    as_json: JsonOption = False,
):
    """Show wallet balances with USD values."""
    from .formatter import format_balances
    from .pipeline import get_wallet_balances

    response = _run(get_wallet_balances(_state(ctx), address))
    if as_json:
        _echo_json(response)
    else:
        format_balances(response)


@app.command()
def quote(
    ctx: typer.Context,
    provider: Annotated[str, typer.Option("--provider", help="panora or hyperion.")],
    from_token: Annotated[str, typer.Option("--from", help="Asset type to sell.")],
    to_token: Annotated[str, typer.Option("--to", help="Asset type to buy.")],
    amount: Annotated[str, typer.Option("--amount", help="Human-readable amount.")],
    decimals: Annotated[
        int | None, typer.Option("--decimals", help="Decimals of the sold token.")
    ] = None,
    slippage: Annotated[
        str, typer.Option("--slippage", help="Slippage in percent.")
    ] = "1",
    as_json: JsonOption = False,
):
    """Get a swap quote from one venue."""
    from .formatter import format_quote
    from .pipeline import get_swap_quote

    body = {
        "provider": provider,
        "fromTokenAddress": from_token,
        "toTokenAddress": to_token,
        "amount": amount,
        "decimals": decimals,
        "slippagePercentage": slippage,
    }
    response = _run(get_swap_quote(_state(ctx), body))
    if as_json:
        _echo_json(response)
    else:
        format_quote(response)


@app.command()
def sources(ctx: typer.Context, as_json: JsonOption = False):
    """List configured pool sources in declaration order."""
    from .formatter import format_sources

    data = [s.to_dict() for s in _state(ctx).registry.snapshot()]
    if as_json:
        _echo_json(data)
    else:
        format_sources(data)


@app.command()
def serve(
    ctx: typer.Context,
    host: Annotated[str | None, typer.Option("--host", help="Bind address.")] = None,
    port: Annotated[int | None, typer.Option("--port", help="Bind port.")] = None,
):
    """Serve the HTTP API with uvicorn."""
    import uvicorn

    from .api import create_app

    state = _state(ctx)
    uvicorn.run(
        create_app(state),
        host=host or state.settings.host,
        port=port or state.settings.port,
        log_level=state.settings.log_level.lower(),
    )


def run() -> None:
    """Entrypoint used by the console script."""
    app()


if __name__ == "__main__":
    run()
