import re
from typing import Any, Dict, List

from bs4 import BeautifulSoup
from loguru import logger

from cricket_venues.models.enums import Source
from .base_scraper import BaseScraper, ParseError


def _split_list(text: str) -> List[str]:
    return [part.strip() for part in text.split(",") if part.strip()]


class ESPNScraper(BaseScraper):
    """Scraper for ESPN Cricinfo ground pages."""

    source: Source = Source.ESPN

    async def fetch_venue(self, url: str) -> Dict[str, Any]:
        logger.info(f"Fetching venue from {self.source.value}: {url}")
        soup = await self._fetch_html(url)
        rows = self._label_rows(soup)

        venue_data: Dict[str, Any] = {}

        title = soup.title.get_text(strip=True) if soup.title else ""
        if title:
            name = title.split("|")[0].split(",")[0].strip()
            if name and name.lower() != "overview":
                venue_data["venueName"] = name

        if not rows and "venueName" not in venue_data:
            raise ParseError(f"No ground details found on {url}")

        def info(label: str) -> str:
            # First row whose label contains `label`; partial matches are enough
            for row_label, value in rows:
                if label in row_label:
                    return value
            return ""

        venue_data["alsoKnownAs"] = _split_list(info("Also knows as"))
        venue_data["opened"] = info("Established")
        venue_data["capacity"] = info("Capacity")
        venue_data["dimensions"] = info("Playing area")
        venue_data["ends"] = _split_list(info("End Names"))
        venue_data["floodLights"] = info("Flood Light")
        venue_data["homeTeams"] = _split_list(info("Home Teams"))
        venue_data["otherSports"] = _split_list(
            re.sub(r"\s+as well as\s+", ",", info("Other Sports"))
        )
        venue_data["pitch"] = info("Pitch")
        venue_data["curator"] = info("Curator")

        logger.info(
            f"Parsed {len(rows)} labelled rows from {self.source.value} for {venue_data.get('venueName', url)}"
        )
        return venue_data

    def _label_rows(self, soup: BeautifulSoup) -> List[tuple]:
        rows = []
        for row in soup.find_all("tr"):
            cells = row.find_all("td")
            if len(cells) > 1:
                rows.append(
                    (
                        cells[0].get_text(" ", strip=True),
                        cells[1].get_text(" ", strip=True),
                    )
                )
        return rows
