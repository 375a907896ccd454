import re
from typing import Any, Dict, Optional

from bs4 import BeautifulSoup, Tag
from loguru import logger

from cricket_venues.models.enums import MatchFormat, Source
from cricket_venues.models.venue import MatchRecord
from .base_scraper import BaseScraper, ParseError

CRICKET_DOT_COM_HEADERS = {
    "Referer": "https://www.cricket.com/",
}

NAME_SELECTOR = 'p[class="text-text-header/60 md:text-sm text-xs font-semibold"]'
VENUE_CARD_SELECTOR = "div.bg-foreGround.px-4.pb-2.rounded-md"

# Card labels normalised onto the keys the merge knows about
LABEL_MAP = {
    "name": "Name",
    "country": "Country",
    "city": "City",
    "capacity": "Capacity",
    "bowling ends": "Bowling Ends",
    "flood lights": "Flood Lights",
}

STAT_LABELS = {
    "first": "first",
    "recent": "recent",
    "last": "recent",
    "highest": "highestTeamScore",
    "lowest": "lowestTeamScore",
}

SCORE_PATTERN = re.compile(r"\d+/\d+|\b\d{2,3}\b")
YEAR_PATTERN = re.compile(r"\b(?:19|20)\d{2}\b")
DATE_PATTERN = re.compile(r"\d{1,2}[\s/.-]\w+[\s/.-]\d{4}")


def extract_venue_name(soup: BeautifulSoup) -> Optional[str]:
    """Venue header text before the first comma ("Narendra Modi Stadium, Ahmedabad")."""
    for element in (soup.select_one(NAME_SELECTOR), soup.find("h1")):
        if element is None:
            continue
        name = element.get_text(" ", strip=True).split(",")[0].strip()
        if name:
            return name
    return None


def _card_value(card: Tag, label: str) -> str:
    """Text of the <p> following the <p> that reads e.g. 'Country :'."""
    for paragraph in card.find_all("p"):
        if label in paragraph.get_text(" ", strip=True):
            sibling = paragraph.find_next_sibling("p")
            if sibling:
                return sibling.get_text(" ", strip=True)
    return ""


class CricketDotComScraper(BaseScraper):
    """Scraper for cricket.com venue pages."""

    source: Source = Source.CRICKET_DOT_COM

    async def fetch_venue(self, url: str) -> Dict[str, Any]:
        logger.info(f"Fetching venue from {self.source.value}: {url}")
        soup = await self._fetch_html(url, headers=CRICKET_DOT_COM_HEADERS)

        venue_name = extract_venue_name(soup)
        details = self._extract_details(soup)
        if not venue_name and not details:
            raise ParseError(f"No venue card found on {url}")

        card = soup.select_one(VENUE_CARD_SELECTOR)
        record: Dict[str, Any] = {"venueName": venue_name or ""}
        record.update(details)
        if card is not None:
            record["country"] = _card_value(card, "Country :")
            record["capacity"] = _card_value(card, "Capacity :")
            record["floodLights"] = _card_value(card, "Flood Lights :")
        record["stats"] = self._extract_stats(soup)

        logger.info(
            f"Parsed {len(details)} card fields from {self.source.value} for {venue_name}"
        )
        return record

    def _extract_details(self, soup: BeautifulSoup) -> Dict[str, str]:
        details: Dict[str, str] = {}
        for row in soup.select(f"{VENUE_CARD_SELECTOR} .flex.items-center.py-2.gap-2"):
            paragraphs = row.find_all("p")
            if len(paragraphs) < 2:
                continue
            label = paragraphs[0].get_text(" ", strip=True).rstrip(":").strip()
            value = paragraphs[-1].get_text(" ", strip=True)
            if label and value and value != "-":
                details[LABEL_MAP.get(label.lower(), label)] = value
        return details

    def _extract_stats(self, soup: BeautifulSoup) -> Dict[str, Dict[str, Any]]:
        """Stat cards are sections tagged with the format name and holding
        label/value pairs such as 'Highest Total' / '241/4 AUS vs WI 2023'."""
        stats: Dict[str, Dict[str, Any]] = {}
        for match_format in MatchFormat:
            section = soup.find(
                attrs={"id": re.compile(rf"^{match_format.value}", re.IGNORECASE)}
            )
            if section is None:
                continue
            format_stats: Dict[str, Any] = {}
            for card in section.find_all(["div", "li"], recursive=True):
                paragraphs = card.find_all("p", recursive=False)
                if len(paragraphs) < 2:
                    continue
                label = paragraphs[0].get_text(" ", strip=True).lower()
                value = " ".join(p.get_text(" ", strip=True) for p in paragraphs[1:])
                stat_key = next(
                    (k for prefix, k in STAT_LABELS.items() if label.startswith(prefix)),
                    None,
                )
                if not stat_key:
                    continue
                if stat_key in ("first", "recent"):
                    stat_key = f"{stat_key}{match_format.label}"
                if stat_key in format_stats:
                    continue
                format_stats[stat_key] = self._match_record(value, stat_key)
            if format_stats:
                stats[match_format.value] = format_stats
        return stats

    def _match_record(self, text: str, stat_key: str) -> Dict[str, Any]:
        year = YEAR_PATTERN.search(text)
        date = DATE_PATTERN.search(text)
        teams = re.search(r"([A-Za-z][A-Za-z .]+?)\s+vs\.?\s+([A-Za-z][A-Za-z .]+?)(?=\s+\d|$|,)", text)
        record = MatchRecord(
            date=date.group(0) if date else "",
            year=year.group(0) if year else "",
            teams=f"{teams.group(1).strip()} vs {teams.group(2).strip()}" if teams else "",
        )
        if stat_key.endswith("TeamScore"):
            score = SCORE_PATTERN.search(text)
            record.score = score.group(0) if score else ""
        return record.model_dump(exclude_none=True)
