import asyncio
import re
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag
from loguru import logger

from cricket_venues.config.settings import settings
from cricket_venues.models.enums import MatchFormat, Source
from cricket_venues.models.venue import MatchRecord
from cricket_venues.utils.misc_utils import parse_match_info
from .base_scraper import BaseScraper, ParseError, ScraperError

CRICBUZZ_BASE_URL = "https://www.cricbuzz.com"

NAME_SELECTORS = [
    "h1",
    ".cb-nav-hdr",
    ".cb-font-24",
    ".cb-font-20",
]

STAT_KEYWORDS = (
    "matches",
    "total",
    "average",
    "highest",
    "lowest",
    "won",
    "score",
    "defended",
    "chased",
)

VENUE_KEYWORDS = (
    "opened",
    "capacity",
    "ends",
    "location",
    "time zone",
    "home to",
    "floodlights",
    "curator",
    "known as",
)

# Summary rows that never belong in the venue record
UNWANTED_KEYS = {
    "Total matches",
    "Matches won batting first",
    "Matches won bowling first",
    "Average 1st Inns scores",
    "Average 2nd Inns scores",
    "Average 3rd Inns scores",
    "Average 4th Inns scores",
    "Highest total recorded",
    "Lowest total recorded",
    "Highest score chased",
    "Lowest score defended",
}

FULL_DATE_PATTERN = re.compile(
    r"(\w{3}\s+\d{1,2}-\w{3}\s+\d{1,2},?\s+\d{4}|\w{3}\s+\d{1,2},?\s+\d{4}|\d{1,2}\s+\w{3}\s+\d{4})"
)
SHORT_DATE_PATTERN = re.compile(
    r"(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)\s+\d{1,2}", re.IGNORECASE
)
YEAR_PATTERN = re.compile(r"\b(?:19|20)\d{2}\b")
TITLE_SUFFIX_PATTERN = re.compile(
    r"\s*-?\s*(Live Cricket Score|Commentary|Scorecard).*$", re.IGNORECASE
)


def _format_from_text(text: str) -> Optional[MatchFormat]:
    text = text.lower()
    if re.search(r"\btests?\b", text):
        return MatchFormat.TEST
    if re.search(r"\bodis?\b", text):
        return MatchFormat.ODI
    if re.search(r"\bt20i?s?\b", text) or "twenty" in text:
        return MatchFormat.T20
    return None


def _is_stat_label(label: str) -> bool:
    lowered = label.lower()
    return any(k in lowered for k in STAT_KEYWORDS) and not any(
        k in lowered for k in VENUE_KEYWORDS
    )


def _stat_key_for(label: str, match_format: MatchFormat) -> Optional[str]:
    """Maps a row label ('Highest total recorded') onto a FormatStats key."""
    lowered = label.lower().strip()
    mapping = (
        ("first", f"first{match_format.label}"),
        ("recent", f"recent{match_format.label}"),
        ("highest", "highestTeamScore"),
        ("lowest", "lowestTeamScore"),
    )
    for prefix, stat_key in mapping:
        if lowered.startswith(prefix):
            return stat_key
    return None


class CricbuzzScraper(BaseScraper):
    """Scraper for Cricbuzz venue pages."""

    source: Source = Source.CRICBUZZ

    def __init__(self, *args, follow_match_links: Optional[bool] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.follow_match_links = (
            settings.follow_match_links
            if follow_match_links is None
            else follow_match_links
        )

    async def fetch_venue(self, url: str) -> Dict[str, Any]:
        logger.info(f"Fetching venue from {self.source.value}: {url}")
        soup = await self._fetch_html(url)

        venue_info: Dict[str, Any] = {}
        stat_rows: Dict[MatchFormat, List[Tuple[str, Tag]]] = {
            f: [] for f in MatchFormat
        }

        for table in soup.find_all("table"):
            table_format = self._detect_format(table)
            for row in table.find_all("tr"):
                cells = row.find_all("td")
                if len(cells) < 2:
                    continue
                label = cells[0].get_text(" ", strip=True)
                value = cells[1].get_text(" ", strip=True)
                if not label or not value:
                    continue
                if _is_stat_label(label):
                    if table_format:
                        stat_rows[table_format].append((label, cells[1]))
                    continue
                venue_info[label] = value

        name = self._extract_name(soup)
        if name:
            venue_info["Name"] = name

        if not venue_info and not any(stat_rows.values()):
            raise ParseError(f"No venue details found on {url}")

        stats: Dict[str, Dict[str, Any]] = {}
        for match_format, rows in stat_rows.items():
            transformed = await self._transform_stats(rows, match_format)
            if transformed:
                stats[match_format.value] = transformed
        venue_info["stats"] = stats

        for key in UNWANTED_KEYS:
            venue_info.pop(key, None)

        logger.info(
            f"Parsed {len(venue_info) - 1} fields and {len(stats)} stat formats from {self.source.value}"
        )
        return venue_info

    def _extract_name(self, soup: BeautifulSoup) -> Optional[str]:
        for selector in NAME_SELECTORS:
            element = soup.select_one(selector)
            if element is None:
                continue
            text = element.get_text(" ", strip=True)
            if 3 < len(text) < 100:
                return text
        return None

    def _detect_format(self, table: Tag) -> Optional[MatchFormat]:
        """Uses the closest heading above the table, then the table itself."""
        heading = table.find_previous(["h1", "h2", "h3", "h4"])
        for text in (
            heading.get_text(" ", strip=True) if heading else "",
            table.get_text(" ", strip=True),
        ):
            match_format = _format_from_text(text)
            if match_format:
                return match_format
        return None

    async def _transform_stats(
        self, rows: List[Tuple[str, Tag]], match_format: MatchFormat
    ) -> Dict[str, Dict[str, Any]]:
        transformed: Dict[str, Dict[str, Any]] = {}
        for label, value_cell in rows:
            stat_key = _stat_key_for(label, match_format)
            if not stat_key or stat_key in transformed:
                continue

            text = value_cell.get_text(" ", strip=True)
            is_team_score = stat_key.endswith("TeamScore")
            link = value_cell.find("a", href=True)

            record: Optional[Dict[str, Any]] = None
            if link and self.follow_match_links:
                match_url = urljoin(CRICBUZZ_BASE_URL, link["href"])
                try:
                    record = await self._fetch_match_record(match_url)
                except ScraperError as e:
                    logger.warning(f"Match details unavailable for {match_url}: {e}")
                await asyncio.sleep(settings.match_detail_delay_seconds)

            if record is None:
                record = self._record_from_text(text)
            if is_team_score:
                record["score"] = text.split(" ")[0]
            else:
                record.pop("score", None)
            transformed[stat_key] = record
        return transformed

    def _record_from_text(self, text: str) -> Dict[str, Any]:
        info = parse_match_info(text)
        if info:
            return MatchRecord(teams=info["teams"]).model_dump()
        return MatchRecord().model_dump()

    async def _fetch_match_record(self, match_url: str) -> Dict[str, Any]:
        """Reads date, year, teams and result from a Cricbuzz match page."""
        soup = await self._fetch_html(match_url)

        title_element = soup.select_one("h1, .cb-nav-main h4, .cb-nav-hdr")
        title = title_element.get_text(" ", strip=True) if title_element else ""
        title = TITLE_SUFFIX_PATTERN.sub("", title).strip()

        series_element = soup.select_one(".cb-nav-subhdr, .cb-series-brcrumb")
        series = series_element.get_text(" ", strip=True) if series_element else ""

        result_element = soup.select_one(".cb-min-stts, .cb-text-complete")
        result = result_element.get_text(" ", strip=True) if result_element else ""
        if "{{premiumScreenName}}" in result:
            result = ""

        info_text = " ".join(
            e.get_text(" ", strip=True)
            for e in soup.select(".cb-mat-info, .cb-mtch-info, .cb-nav-subhdr")
        )
        date = ""
        full_date = FULL_DATE_PATTERN.search(info_text)
        if full_date:
            date = full_date.group(0)
        else:
            short_date = SHORT_DATE_PATTERN.search(info_text)
            if short_date:
                date = short_date.group(0)

        year_match = YEAR_PATTERN.search(date) or YEAR_PATTERN.search(series)
        year = year_match.group(0) if year_match else ""
        # "Mar 02-Mar 06, 2024" -> "Mar 06"
        date = re.sub(r",?\s*\d{4}$", "", date)
        date = re.sub(r"^\w{3}\s+\d{1,2}-", "", date).strip()

        return MatchRecord(
            date=date,
            year=year,
            teams=title.split(",")[0].strip(),
            matchResult=result,
        ).model_dump()
