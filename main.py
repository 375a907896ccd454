import sys
import asyncio

# --- Settings/Logging ---
from cricket_venues.logging.setup import setup_logging
from cricket_venues.config.settings import settings

setup_logging()

from loguru import logger

# --- End Settings/Logging ---

from cricket_venues.batch.runner import BatchSummary, run_batch
from cricket_venues.storage.catalog import CatalogError

from rich import print
from rich.panel import Panel


def print_summary(summary: BatchSummary) -> None:
    print(
        Panel(
            f"Venues in catalog: [bold]{summary.total}[/bold]\n"
            f"Scraped and merged: [green]{summary.scraped}[/green]\n"
            f"No data from any source: [yellow]{summary.no_data}[/yellow]\n"
            f"Skipped (no third-party sources): {summary.skipped}",
            title=str(settings.venues_file_path),
        )
    )


async def main() -> int:
    """Main entry point for the application."""
    logger.info("Starting venue scrape - Scrape, Merge, and Rewrite Catalog")

    try:
        summary = await run_batch(settings.venues_file_path)
    except CatalogError as e:
        logger.error(f"Catalog error, nothing was written: {e}")
        return 1

    logger.success(
        f"Batch finished: {summary.scraped} merged, {summary.no_data} without data, {summary.skipped} skipped."
    )
    print_summary(summary)
    return 0


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Execution interrupted by user (KeyboardInterrupt).")
        sys.exit(0)
    except Exception as e:
        logger.exception(f"Unhandled exception in main execution: {e}")
        sys.exit(1)
