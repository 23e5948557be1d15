"""Rich console tables for CLI output."""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table


def _truncate(value: str, head: int = 10, tail: int = 4) -> str:
    if len(value) <= head + tail + 3:
        return value
    return f"{value[:head]}...{value[-tail:]}"


def _usd(value: float | None) -> str:
    return "-" if value is None else f"${value:,.2f}"


def _pct(value: float | None) -> str:
    return "-" if value is None else f"{value:.2f}%"


def format_pools(response: dict[str, Any], console: Console | None = None) -> None:
    """Print aggregated pools plus a failed-sources panel when any failed."""
    console = console or Console()

    table = Table(title="Pools", header_style="bold")
    table.add_column("Protocol", style="cyan")
    table.add_column("Asset")
    table.add_column("Type", style="dim")
    table.add_column("APR", justify="right", style="green")
    table.add_column("TVL", justify="right")
    table.add_column("Source", style="dim")
    for pool in response["data"]:
        table.add_row(
            pool["protocol"],
            pool["asset"],
            pool.get("poolType") or "",
            _pct(pool["apr"]),
            _usd(pool.get("tvlUsd")),
            pool["sourceName"],
        )
    console.print(table)

    counts = ", ".join(f"{name}: {n}" for name, n in response["protocols"].items())
    console.print(f"[dim]{len(response['data'])} pools[/] {counts}")

    failed = response.get("failedSources") or []
    if failed:
        failures = Table(show_header=False, box=None, padding=(0, 1))
        failures.add_column("Source", style="yellow")
        failures.add_column("Kind", style="dim")
        failures.add_column("Message")
        for f in failed:
            failures.add_row(f["source"], f["kind"], f["message"])
        console.print(
            Panel(failures, title="[bold]Failed sources[/]", border_style="yellow")
        )


def format_balances(response: dict[str, Any], console: Console | None = None) -> None:
    console = console or Console()

    table = Table(title=f"Balances {_truncate(response['address'])}", header_style="bold")
    table.add_column("Symbol", style="cyan")
    table.add_column("Amount", justify="right")
    table.add_column("Price", justify="right", style="dim")
    table.add_column("Value", justify="right", style="green")
    table.add_column("Asset", style="dim")
    for balance in response["balances"]:
        table.add_row(
            _truncate(balance["symbol"], 12, 4),
            f"{balance['normalizedAmount']:,.6f}",
            _usd(balance["usdPrice"]),
            _usd(balance["usdValue"]),
            _truncate(balance["assetType"]),
        )
    console.print(table)
    console.print(f"Total: [bold green]{_usd(response['totalValueUsd'])}[/]")

    for entry in response.get("invalid") or []:
        console.print(
            f"[yellow]skipped[/] {_truncate(entry['assetType'])}: {entry['reason']}"
        )
    for diag in response.get("diagnostics") or []:
        console.print(f"[yellow]warning[/] {diag['source']}: {diag['message']}")


def format_quote(quote: dict[str, Any], console: Console | None = None) -> None:
    console = console or Console()

    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column("Key", style="dim")
    table.add_column("Value", style="cyan")
    table.add_row("Provider", quote["provider"])
    table.add_row("Amount in", quote["amountIn"])
    table.add_row("Amount out", quote["amountOut"])
    table.add_row("Slippage", f"{quote['slippage'] * 100:g}%")
    table.add_row("Path", " -> ".join(_truncate(p) for p in quote["path"]) or "-")
    if "transactionPayload" in quote:
        table.add_row("Function", quote["transactionPayload"]["function"])
    console.print(Panel(table, title="[bold]Swap quote[/]", border_style="blue"))


def format_sources(sources: list[dict[str, Any]], console: Console | None = None) -> None:
    console = console or Console()

    table = Table(title="Sources", header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Enabled")
    table.add_column("Method", style="dim")
    table.add_column("Transform", style="dim")
    table.add_column("URL", style="dim")
    for i, source in enumerate(sources, start=1):
        table.add_row(
            str(i),
            source["name"],
            "[green]yes[/]" if source["enabled"] else "[red]no[/]",
            source["method"],
            source["transform"],
            source["url"],
        )
    console.print(table)
