import asyncio
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger
from pydantic import BaseModel, ValidationError

from cricket_venues.config.settings import settings
from cricket_venues.models.enums import Source
from cricket_venues.models.venue import ScrapeMarker, ThirdPartySources
from cricket_venues.normalization.field_map import SOURCE_PRIORITY
from cricket_venues.normalization.normalizer import Normalizer, RawVenueRecord
from cricket_venues.scrapers.base_scraper import BaseScraper, ScraperError
from cricket_venues.scrapers.cricbuzz_scraper import CricbuzzScraper
from cricket_venues.scrapers.cricketdotcom_scraper import CricketDotComScraper
from cricket_venues.scrapers.espn_scraper import ESPNScraper
from cricket_venues.storage.catalog import read_catalog, save_raw_response, write_catalog

# Keys carried over from the original entry; everything else comes from the merge
BASE_KEYS_TO_KEEP = (
    "_id",
    "sVenueKey",
    "sName",
    "sLocation",
    "sTimezone",
    "eTagStatus",
    "bTagEnabled",
    "dCreated",
    "dUpdated",
    "__v",
    "sLatitude",
    "sLongitude",
    "oThirdparty",
)


class BatchSummary(BaseModel):
    total: int = 0
    scraped: int = 0
    no_data: int = 0
    skipped: int = 0


def create_scrapers() -> Dict[Source, BaseScraper]:
    return {
        Source.CRICBUZZ: CricbuzzScraper(),
        Source.ESPN: ESPNScraper(),
        Source.CRICKET_DOT_COM: CricketDotComScraper(),
    }


def get_clean_stats(stats: Any) -> Optional[Dict[str, Any]]:
    """Keeps only formats where at least one sub-record has any key."""
    if not isinstance(stats, dict):
        return None
    clean_stats = {
        category: category_data
        for category, category_data in stats.items()
        if isinstance(category_data, dict)
        and any(isinstance(m, dict) and len(m) > 0 for m in category_data.values())
    }
    return clean_stats or None


async def scrape_venue(
    third_party: ThirdPartySources,
    scrapers: Dict[Source, BaseScraper],
    normalizer: Normalizer,
    venue_name: Optional[str] = None,
    concurrent: Optional[bool] = None,
) -> Dict[str, Any]:
    """Runs every adapter that has a URL and merges whatever comes back.

    A failing adapter contributes an empty record; it never stops the others.
    """
    if concurrent is None:
        concurrent = settings.concurrent_sources

    async def run_scraper(source: Source) -> RawVenueRecord:
        url = third_party.url_for(source)
        scraper = scrapers.get(source)
        if not url or scraper is None:
            return {}
        try:
            record = await scraper.fetch_venue(url)
        except ScraperError as e:
            logger.error(f"Error scraping {source.value} for {url}: {e}")
            return {}
        except Exception as e:
            logger.exception(f"Unexpected error scraping {source.value} for {url}: {e}")
            return {}
        if not isinstance(record, dict):
            logger.warning(f"{source.value} returned {type(record).__name__}, ignoring")
            return {}
        save_raw_response(source, venue_name, record)
        return record

    if concurrent:
        results = await asyncio.gather(*(run_scraper(s) for s in SOURCE_PRIORITY))
    else:
        results = [await run_scraper(s) for s in SOURCE_PRIORITY]

    raw = dict(zip(SOURCE_PRIORITY, results))
    return normalizer.merge(
        cricbuzz=raw[Source.CRICBUZZ],
        espn=raw[Source.ESPN],
        cricket_dot_com=raw[Source.CRICKET_DOT_COM],
    )


def build_entry(venue: Dict[str, Any], merged: Dict[str, Any]) -> Dict[str, Any]:
    """Splices a merged record into the allow-listed view of a catalog entry."""
    clean_venue = {key: venue[key] for key in BASE_KEYS_TO_KEEP if key in venue}
    previous_stats = get_clean_stats(venue.get("stats"))

    if merged:
        rest = {key: value for key, value in merged.items() if key != "stats"}
        final_venue = {**clean_venue, **rest}
        final_venue["oScraped"] = ScrapeMarker(bResult=True).model_dump()
        stats = get_clean_stats(merged.get("stats")) or previous_stats
        if stats:
            final_venue["stats"] = stats
        return final_venue

    logger.info(f"No new data scraped for {venue.get('sName')}, using cleaned original data.")
    if "scraped" in venue:
        clean_venue["scraped"] = venue["scraped"]
    clean_venue["oScraped"] = ScrapeMarker(bResult=False).model_dump()
    if previous_stats:
        clean_venue["stats"] = previous_stats
    return clean_venue


def _third_party_sources(venue: Dict[str, Any]) -> Optional[ThirdPartySources]:
    o_thirdparty = venue.get("oThirdparty")
    if not isinstance(o_thirdparty, dict) or not o_thirdparty:
        return None
    try:
        return ThirdPartySources.model_validate(o_thirdparty)
    except ValidationError as e:
        logger.warning(f"Malformed oThirdparty for {venue.get('sName')}: {e}")
        return None


async def process_catalog(
    venues: List[Any],
    scrapers: Dict[Source, BaseScraper],
    normalizer: Optional[Normalizer] = None,
    concurrent: Optional[bool] = None,
) -> Tuple[List[Any], BatchSummary]:
    """Processes venues strictly one after another."""
    normalizer = normalizer or Normalizer()
    summary = BatchSummary(total=len(venues))
    updated_venues: List[Any] = []

    for index, venue in enumerate(venues, start=1):
        if not isinstance(venue, dict):
            logger.warning(f"Entry {index} is not an object, keeping it as is.")
            summary.skipped += 1
            updated_venues.append(venue)
            continue

        logger.info(f"Processing Venue {index}/{len(venues)}: {venue.get('sName')}")
        third_party = _third_party_sources(venue)
        if third_party is None:
            logger.info(f"Skipping venue {venue.get('sName')} as it has no 'oThirdparty' field.")
            summary.skipped += 1
            updated_venues.append(venue)
            continue

        merged = await scrape_venue(
            third_party,
            scrapers,
            normalizer,
            venue_name=venue.get("sName"),
            concurrent=concurrent,
        )
        if merged:
            summary.scraped += 1
        else:
            summary.no_data += 1
        updated_venues.append(build_entry(venue, merged))

    return updated_venues, summary


async def run_batch(path: Optional[Path] = None) -> BatchSummary:
    """Reads the catalog, scrapes every venue, and rewrites the file once."""
    path = Path(path or settings.venues_file_path)
    venues = read_catalog(path)

    scrapers = create_scrapers()
    try:
        updated_venues, summary = await process_catalog(venues, scrapers)
    finally:
        await asyncio.gather(
            *(scraper.close() for scraper in scrapers.values()),
            return_exceptions=True,
        )

    write_catalog(path, updated_venues)
    return summary
