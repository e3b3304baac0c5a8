"""CLI entry point for querying wallet assets, balances and rates."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TypeVar

import typer

from wallet_assets.config import Config, load_config
from wallet_assets.logging_setup import setup_logging
from wallet_assets.models import AssetWithBalance
from wallet_assets.service import AssetsService, build_assets_service

app = typer.Typer(help="Asset metadata, balances and cross rates for a Waves wallet")

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _load(config_path: Path) -> Config:
    try:
        cfg = load_config(config_path)
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    setup_logging(cfg.logging)
    logger.debug(f"Configuration loaded from {config_path}")
    return cfg


def _run(config_path: Path, query: Callable[[AssetsService], Awaitable[T]]) -> T:
    cfg = _load(config_path)
    service = build_assets_service(cfg)
    try:
        return asyncio.run(query(service))
    except Exception as exc:
        logger.debug("Query failed", exc_info=True)
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def _echo_balance(asset: AssetWithBalance) -> None:
    typer.echo(f"{asset.name:<20} {asset.balance:>24,.{asset.precision}f}  {asset.id}")


@app.command()
def info(
    asset_id: str = typer.Argument(..., help="Asset id"),
    config: Path = typer.Option(
        "config.toml", "--config", "-c", help="Path to configuration file"
    ),
) -> None:
    """Show asset metadata."""
    asset = _run(config, lambda service: service.get_asset_info(asset_id))

    typer.echo(f"Id:          {asset.id}")
    typer.echo(f"Name:        {asset.name}")
    typer.echo(f"Precision:   {asset.precision}")
    typer.echo(f"Reissuable:  {asset.reissuable}")
    typer.echo(f"Quantity:    {asset.quantity}")
    typer.echo(f"Issued:      {asset.timestamp.isoformat()}")
    typer.echo(f"Issuer:      {asset.sender}")
    if asset.description:
        typer.echo(f"Description: {asset.description}")


@app.command()
def balance(
    asset_id: str = typer.Argument(..., help="Asset id"),
    config: Path = typer.Option(
        "config.toml", "--config", "-c", help="Path to configuration file"
    ),
) -> None:
    """Show the wallet balance of one asset."""
    _echo_balance(_run(config, lambda service: service.get_balance(asset_id)))


@app.command()
def balances(
    asset_ids: list[str] | None = typer.Argument(
        None, help="Asset ids, all held assets if omitted"
    ),
    limit: int | None = typer.Option(None, "--limit", help="Maximum number of entries"),
    offset: int | None = typer.Option(None, "--offset", help="Entries to skip"),
    config: Path = typer.Option(
        "config.toml", "--config", "-c", help="Path to configuration file"
    ),
) -> None:
    """Show wallet balances."""
    result = _run(
        config,
        lambda service: service.get_balance_list(asset_ids or None, limit=limit, offset=offset),
    )
    for asset in result:
        _echo_balance(asset)


@app.command()
def rate(
    id_from: str = typer.Argument(..., help="Asset to convert from"),
    id_to: str = typer.Argument(..., help="Asset to convert to"),
    amount: float | None = typer.Option(None, "--amount", "-a", help="Amount to convert"),
    config: Path = typer.Option(
        "config.toml", "--config", "-c", help="Path to configuration file"
    ),
) -> None:
    """Show the exchange rate between two assets."""
    rate_api = _run(config, lambda service: service.get_rate(id_from, id_to))

    typer.echo(f"Rate: {rate_api.rate:.8f}")
    if amount is not None:
        typer.echo(f"{amount} -> {rate_api.exchange(amount)}")


@app.command()
def change(
    id_from: str = typer.Argument(..., help="Asset to convert from"),
    id_to: str = typer.Argument(..., help="Asset to convert to"),
    config: Path = typer.Option(
        "config.toml", "--config", "-c", help="Path to configuration file"
    ),
) -> None:
    """Show the daily rate change between two assets."""
    value = _run(config, lambda service: service.get_change(id_from, id_to))
    typer.echo(f"Change: {value:.4f}")


@app.command()
def history(
    id_from: str = typer.Argument(..., help="Asset to convert from"),
    id_to: str = typer.Argument(..., help="Asset to convert to"),
    interval: int = typer.Option(60, "--interval", "-i", help="Candle size in minutes"),
    count: int = typer.Option(24, "--count", "-n", help="Number of candles"),
    config: Path = typer.Option(
        "config.toml", "--config", "-c", help="Path to configuration file"
    ),
) -> None:
    """Show the rate history between two assets."""
    points = _run(
        config, lambda service: service.get_rate_history(id_from, id_to, interval, count)
    )
    if not points:
        typer.echo("No history available")
        return
    for point in points:
        typer.echo(f"{point.timestamp.isoformat()}  {point.rate:.8f}")


@app.command(name="bid-ask")
def bid_ask(
    asset_id_1: str = typer.Argument(..., help="Amount asset"),
    asset_id_2: str = typer.Argument(..., help="Price asset"),
    config: Path = typer.Option(
        "config.toml", "--config", "-c", help="Path to configuration file"
    ),
) -> None:
    """Show the best bid and ask of a market."""
    quote = _run(config, lambda service: service.get_bid_ask(asset_id_1, asset_id_2))
    typer.echo(f"Bid: {quote.bid}")
    typer.echo(f"Ask: {quote.ask}")


if __name__ == "__main__":
    app()
