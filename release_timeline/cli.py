"""
Command-line interface for release-timeline.

Provides commands to create the schema, seed the source registry, run
scrapers and report store status.

Usage:
    release-timeline init-db                 # Create tables, seed sources if empty
    release-timeline seed-sources            # Upsert the default source list
    release-timeline scrape all              # Run every scraper in order
    release-timeline scrape reddit --limit 3 # Search Reddit for 3 newest releases
    release-timeline status                  # Row counts
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Any

import click

from release_timeline.observability.logging import setup_logging

SCRAPER_CHOICES = (
    "all",
    "catalog",
    "official-releases",
    "official-reviews",
    "blog-reviews",
    "reddit",
    "x",
)


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """Release Timeline - AI release and review scrapers."""
    setup_logging("DEBUG" if debug else None)


def _fail(message: str) -> None:
    click.echo(click.style(message, fg="red"), err=True)
    sys.exit(1)


@main.command("init-db")
@click.option("--seed/--no-seed", default=True, help="Seed sources when the table is empty")
def init_db(seed: bool) -> None:
    """Create the releases, reviews and scraper_sources tables."""
    from release_timeline.sources.service import SourcesService
    from release_timeline.storage.database import Database, DatabaseUnavailable
    from release_timeline.storage.repository import TimelineRepository

    async def run() -> int:
        db = Database()
        await db.connect()
        try:
            await TimelineRepository(db).create_tables()
            seeded = await SourcesService(db).ensure_seeded() if seed else 0
        finally:
            await db.close()
        return seeded

    try:
        seeded = asyncio.run(run())
    except DatabaseUnavailable as e:
        _fail(f"Cannot connect to database: {e}")
        return

    click.echo("Database initialized successfully")
    if seeded:
        click.echo(f"Seeded {seeded} scraper sources")


@main.command("seed-sources")
@click.option(
    "--path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="JSON seed file (default: bundled source list)",
)
def seed_sources(path: Path | None) -> None:
    """Upsert scraper sources from a JSON file."""
    from release_timeline.sources.service import SourcesService
    from release_timeline.storage.database import Database, DatabaseUnavailable

    async def run() -> int:
        db = Database()
        await db.connect()
        try:
            service = SourcesService(db)
            await service.repository.create_table()
            return await service.seed_from_json(path)
        finally:
            await db.close()

    try:
        count = asyncio.run(run())
    except DatabaseUnavailable as e:
        _fail(f"Cannot connect to database: {e}")
        return
    except (KeyError, ValueError) as e:
        _fail(f"Invalid seed file: {e}")
        return

    click.echo(f"Seeded {count} scraper sources")


def _print_results(results: dict[str, Any]) -> None:
    click.echo("\nScrape Results:")
    click.echo("-" * 60)
    click.echo(f"  {'scraper':<20}{'added':>8}{'updated':>9}{'skipped':>9}{'errors':>8}")
    for name, result in results.items():
        color = "green" if result.ok else "yellow"
        click.echo(
            click.style(
                f"  {name:<20}{result.added:>8}{result.updated:>9}"
                f"{result.skipped:>9}{len(result.errors):>8}",
                fg=color,
            )
        )
    click.echo("-" * 60)

    for name, result in results.items():
        for error in result.errors:
            click.echo(click.style(f"  [{name}] {error}", fg="red"))


@main.command()
@click.argument("scrapers", nargs=-1, type=click.Choice(SCRAPER_CHOICES))
@click.option("--limit", default=None, type=int, help="Releases to search reviews for")
@click.option("--offset", default=0, type=int, help="Releases to skip (newest first)")
@click.option(
    "--since",
    default=None,
    type=click.DateTime(formats=["%Y-%m-%d"]),
    help="Only search reviews for releases on or after this date (YYYY-MM-DD)",
)
@click.option("--metrics-port", default=None, type=int, help="Expose Prometheus metrics on this port")
@click.option("--strict", is_flag=True, help="Exit with status 1 if any scraper reported errors")
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
def scrape(
    scrapers: tuple[str, ...],
    limit: int | None,
    offset: int,
    since: Any,
    metrics_port: int | None,
    strict: bool,
    as_json: bool,
) -> None:
    """Run scrapers in pipeline order (default: all).

    Example:
        release-timeline scrape catalog official-releases
        release-timeline scrape reddit x --since 2025-01-01 --limit 5
    """
    from release_timeline.ingestion.http_client import FeedFetcher
    from release_timeline.observability.metrics import get_metrics
    from release_timeline.pipeline.base import ScrapeOptions
    from release_timeline.pipeline.runner import ScrapePipeline
    from release_timeline.storage.database import Database, DatabaseUnavailable
    from release_timeline.storage.repository import TimelineRepository

    if metrics_port:
        get_metrics().start_server(metrics_port)

    options = ScrapeOptions(
        since=since.date() if since else None,
        limit=limit,
        offset=offset,
    )

    async def run():
        db = Database()
        await db.connect()
        try:
            async with FeedFetcher() as fetcher:
                pipeline = ScrapePipeline(TimelineRepository(db), fetcher, options=options)
                return await pipeline.run(scrapers or None)
        finally:
            await db.close()

    try:
        results = asyncio.run(run())
    except DatabaseUnavailable as e:
        _fail(f"Cannot connect to database: {e}")
        return

    if as_json:
        click.echo(json.dumps({n: r.to_dict() for n, r in results.items()}, indent=2))
    else:
        _print_results(results)

    if strict and any(not r.ok for r in results.values()):
        sys.exit(1)


@main.command()
def status() -> None:
    """Show release, review and source counts."""
    from release_timeline.storage.database import Database, DatabaseUnavailable
    from release_timeline.storage.repository import TimelineRepository

    async def run() -> dict[str, Any]:
        db = Database()
        await db.connect()
        try:
            repo = TimelineRepository(db)
            return {
                "releases": await repo.count_releases(),
                "reviews": await repo.count_reviews(),
                "reviews_by_source": await repo.count_reviews_by_source(),
                "sources": await repo.sources.count(),
                "enabled_sources": await repo.sources.count(enabled_only=True),
            }
        finally:
            await db.close()

    try:
        counts = asyncio.run(run())
    except DatabaseUnavailable as e:
        _fail(f"Cannot connect to database: {e}")
        return

    click.echo("\nStore Status:")
    click.echo("-" * 40)
    click.echo(f"  Releases:        {counts['releases']}")
    click.echo(f"  Reviews:         {counts['reviews']}")
    for source, n in counts["reviews_by_source"].items():
        click.echo(f"    {source:<14} {n}")
    click.echo(f"  Sources:         {counts['sources']} ({counts['enabled_sources']} enabled)")
    click.echo("-" * 40)


if __name__ == "__main__":
    main()
