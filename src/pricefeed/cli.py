"""Click-based CLI for pricefeed.

Thin wrapper around library modules. Zero business logic — every operation
delegates to the config layer and a ``DataFeed``.
"""

from __future__ import annotations

import asyncio
import json

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from pricefeed.core.config import Interval

console = Console(stderr=True)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run_async(coro):
    """Run an async coroutine from synchronous Click code."""
    return asyncio.run(coro)


def _load_config(ctx: click.Context):
    """Load config lazily, caching on first call."""
    if "config" not in ctx.obj:
        from pricefeed.core import load_config

        ctx.obj["config"] = load_config(config_path=ctx.obj.get("config_path"))
    return ctx.obj["config"]


def _fail(exc: Exception) -> None:
    """Report a fatal error and exit with status 1."""
    console.print(f"[red]Error:[/red] {escape(str(exc))}")
    raise SystemExit(1)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    envvar="PRICEFEED_CONFIG",
    default=None,
    help="Path to pricefeed.yml config file.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable debug logging.",
)
@click.version_option(package_name="pricefeed")
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """pricefeed: intraday market data ingestion."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose


# ---------------------------------------------------------------------------
# update
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("symbol")
@click.option(
    "--api-key-file",
    "-k",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="File holding the Alpha Vantage API key. Overrides config.",
)
@click.option(
    "--interval",
    "-i",
    type=click.Choice([i.value for i in Interval]),
    default=None,
    help="Sampling interval. Default: from config (5min).",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@click.pass_context
def update(
    ctx: click.Context,
    symbol: str,
    api_key_file: str | None,
    interval: str | None,
    output_format: str,
) -> None:
    """Fetch the latest intraday prices for SYMBOL."""
    from pricefeed.core import PriceFeedError, configure_logging, read_api_key
    from pricefeed.feeds import AlphaVantageDataFeed

    symbol = symbol.strip().upper()
    if not symbol:
        raise click.UsageError("SYMBOL must not be empty")

    try:
        config = _load_config(ctx)
        configure_logging(config.logging.level, verbose=ctx.obj["verbose"])

        av_config = config.alpha_vantage
        if interval is not None:
            av_config = av_config.model_copy(update={"interval": Interval(interval)})
        api_key = (
            read_api_key(api_key_file)
            if api_key_file is not None
            else av_config.resolve_api_key()
        )

        feed = AlphaVantageDataFeed(api_key, config=av_config)
        prices = _run_async(feed.update(symbol))
    except PriceFeedError as exc:
        _fail(exc)

    if output_format == "json":
        _output_prices_json(symbol, prices)
    else:
        _output_prices_table(symbol, prices)


def _output_prices_table(symbol: str, prices) -> None:
    """Render price points as a Rich table."""
    table = Table(title=f"{symbol} intraday")
    table.add_column("Timestamp", style="bold")
    table.add_column("Open", justify="right")
    table.add_column("High", justify="right")
    table.add_column("Low", justify="right")
    table.add_column("Close", justify="right")
    table.add_column("Volume", justify="right")

    for p in prices:
        table.add_row(
            p.timestamp.isoformat(),
            f"{p.open:.4f}",
            f"{p.high:.4f}",
            f"{p.low:.4f}",
            f"{p.close:.4f}",
            f"{p.volume:,}",
        )

    console.print(table)
    console.print(f"[green]✓[/green] {len(prices)} price points for {symbol}")


def _output_prices_json(symbol: str, prices) -> None:
    """Write price points as JSON to stdout."""
    output = {
        "symbol": symbol,
        "prices": [p.model_dump(mode="json") for p in prices],
    }
    click.echo(json.dumps(output, indent=2, default=str))


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
