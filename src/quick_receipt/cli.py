"""CLI entry point for quick-receipt."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

import click

from quick_receipt.config import get_export_path, get_store_path
from quick_receipt.errors import PersistenceError, ReceiptScanError
from quick_receipt.extraction import create_extraction_agent
from quick_receipt.imaging import normalize_image
from quick_receipt.pantry import detect_pantry_items, find_recipes, prioritize_items
from quick_receipt.prices import search_nearby_stores
from quick_receipt.session import SCAN_FAILED_MESSAGE, ReceiptSession
from quick_receipt.store import LocalReceiptStore

if TYPE_CHECKING:
    from pydantic_ai import Agent

logger = logging.getLogger(__name__)


def _open_session(agent: Agent[None, str] | None = None) -> ReceiptSession:
    try:
        return ReceiptSession(LocalReceiptStore(get_store_path()), agent=agent)
    except PersistenceError as exc:
        raise click.ClickException(str(exc)) from exc


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """QuickReceipt — scan receipts and track spending."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.argument(
    "images", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False)
)
def scan(images: tuple[str, ...]) -> None:
    """Scan one or more receipt photos and save them."""
    try:
        agent = create_extraction_agent()
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    session = _open_session(agent)

    async def run_all() -> list:
        return await asyncio.gather(
            *(session.scan(Path(image).read_bytes()) for image in images)
        )

    outcomes = asyncio.run(run_all())
    for image, outcome in zip(images, outcomes, strict=True):
        if outcome.record is None:
            click.echo(f"{image}: {outcome.error}", err=True)
            continue
        record = outcome.record
        click.echo(
            f"{image}: {record.merchant_name}  {record.date}  "
            f"{record.category}  ${record.total_amount:.2f}"
        )


@cli.command(name="list")
def list_receipts() -> None:
    """List saved receipts, most recent first."""
    session = _open_session()
    receipts = session.recent()
    if not receipts:
        click.echo("No receipts yet")
        return
    click.echo(f"{len(receipts)} total")
    for record in receipts:
        click.echo(
            f"{record.date}  {record.merchant_name:<24} {record.category:<16} "
            f"${record.total_amount:.2f}"
        )


@cli.command()
def overview() -> None:
    """Show headline spending figures."""
    stats = _open_session().analytics()
    click.echo(f"Total Spent:    ${stats.total_spent:.2f}")
    click.echo(f"This Month:     ${stats.monthly:.2f}")
    click.echo(f"Total Receipts: {stats.receipt_count}")


@cli.command()
def analytics() -> None:
    """Show windowed totals, category breakdown and top merchants."""
    stats = _open_session().analytics()
    click.echo(f"Weekly:  ${stats.weekly:.2f}")
    click.echo(f"Monthly: ${stats.monthly:.2f}")
    click.echo(f"Yearly:  ${stats.yearly:.2f}")

    click.echo("\nSpending by Category")
    for category, total in stats.ranked_categories():
        share = stats.category_share(category)
        click.echo(f"  {category:<20} ${total:.2f}  ({share:.0f}%)")

    click.echo("\nMost Visited Stores")
    for merchant, count in stats.ranked_merchants()[:5]:
        click.echo(f"  {merchant:<20} {count} visits")


@cli.command()
def savings() -> None:
    """Compare prices at nearby stores (mock data)."""
    stores = asyncio.run(search_nearby_stores())
    click.echo("Nearby Store Prices")
    for quote in stores:
        click.echo(f"  {quote.store:<12} {quote.distance or '':<8} ${quote.price:.2f}")
    click.echo("Price comparison is approximate. Always verify prices at the store.")


@cli.command()
def insights() -> None:
    """Show shopping insights and recommendations."""
    stats = _open_session().analytics()
    click.echo(
        f"Top Spending Category: {stats.top_category} "
        f"(${stats.top_category_total:.2f} total)"
    )
    click.echo(f"Average Purchase:      ${stats.average_purchase:.2f}")
    click.echo(f"Shopping Frequency:    {stats.shopping_frequency} trips per month")
    click.echo(f"Spent This Month:      ${stats.monthly:.2f}")
    click.echo("\nRecommendations")
    for tip in stats.recommendations():
        click.echo(f"  - {tip}")


@cli.command()
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for the .xlsx file (default: RECEIPT_EXPORT_PATH).",
)
def export(output_dir: Path | None) -> None:
    """Export receipts and analytics to an Excel workbook."""
    session = _open_session()
    try:
        target = session.export(output_dir or get_export_path())
    except PersistenceError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Exported {len(session.receipts)} receipts to {target}")


@cli.command()
@click.argument("image", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--opened",
    multiple=True,
    help="Name of an item that has been opened (repeatable).",
)
@click.option("--recipes", is_flag=True, help="Also suggest recipes.")
def pantry(image: str, opened: tuple[str, ...], recipes: bool) -> None:
    """Identify pantry items in a photo, most urgent first."""
    now = datetime.now(tz=UTC)
    opened_names = {name.casefold() for name in opened}

    async def run() -> tuple[list, list]:
        data = Path(image).read_bytes()
        normalized = await asyncio.to_thread(normalize_image, data)
        items = [
            item.model_copy(
                update={"is_opened": item.name.casefold() in opened_names}
            )
            for item in await detect_pantry_items(normalized)
        ]
        suggestions = await find_recipes(items, now) if recipes else []
        return items, suggestions

    try:
        items, suggestions = asyncio.run(run())
    except ReceiptScanError:
        logger.warning("Pantry scan failed", exc_info=True)
        raise click.ClickException(SCAN_FAILED_MESSAGE) from None

    if not items:
        click.echo("No pantry items found")
        return
    for ranked in prioritize_items(items, now):
        item = ranked.item
        expiry = f"expires {item.expiry_date}" if item.expiry_date else ""
        click.echo(
            f"  [{ranked.priority:>2}] {item.name:<24} {item.quantity:<12} {expiry}"
        )

    if suggestions:
        click.echo("\nRecipe Ideas")
        for recipe in suggestions:
            click.echo(
                f"  {recipe.name} ({recipe.match_score}% match"
                f"{', ' + recipe.time_to_cook if recipe.time_to_cook else ''})"
            )
            click.echo(f"    {', '.join(recipe.ingredients)}")
