from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx
from bs4 import BeautifulSoup
from loguru import logger
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from cricket_venues.config.settings import settings
from cricket_venues.models.enums import Source

# Define common HTTP status codes that warrant a retry
RETRYABLE_STATUS_CODES = {408, 429, 500, 502, 503, 504}


class ScraperError(Exception):
    """Custom exception for scraper-related errors."""

    pass


class FetchError(ScraperError):
    """Raised when a page cannot be downloaded."""

    pass


class ParseError(ScraperError):
    """Raised when a downloaded page does not look like a venue page."""

    pass


class RetryableStatusError(FetchError):
    """Status codes from RETRYABLE_STATUS_CODES; retried when attempts allow."""

    pass


class BaseScraper(ABC):
    """Abstract base class for venue page scrapers."""

    source: Source

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.fetch_timeout_seconds),
            follow_redirects=True,
            headers={
                "User-Agent": settings.user_agent,
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
                "Accept-Language": "en-US,en;q=0.5",
            },
        )

    @abstractmethod
    async def fetch_venue(self, url: str) -> Dict[str, Any]:
        """Fetch one venue page and return its raw, site-keyed record.

        Args:
            url: The venue page on this scraper's site.

        Returns:
            A dictionary keyed the way the site labels things. May be empty.
        """
        pass

    @retry(
        stop=stop_after_attempt(settings.fetch_attempts),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((httpx.RequestError, RetryableStatusError)),
        reraise=True,
    )
    async def _get(self, url: str, headers: Optional[Dict[str, str]] = None) -> httpx.Response:
        logger.debug(f"GET {url}", source=self.source.value, url=url)
        response = await self.client.get(url, headers=headers)
        if response.status_code in RETRYABLE_STATUS_CODES:
            logger.warning(
                f"{self.source.value} returned {response.status_code} for {url}"
            )
            raise RetryableStatusError(
                f"HTTP {response.status_code} from {self.source.value}"
            )
        response.raise_for_status()
        return response

    async def _fetch_html(
        self, url: str, headers: Optional[Dict[str, str]] = None
    ) -> BeautifulSoup:
        """Downloads `url` and parses it, wrapping transport failures in FetchError."""
        try:
            response = await self._get(url, headers=headers)
        except httpx.HTTPStatusError as e:
            logger.error(
                f"HTTP error during request for {self.source.value}: {e.response.status_code} - {url}"
            )
            raise FetchError(f"HTTP error: {e.response.status_code}") from e
        except httpx.RequestError as e:
            logger.error(f"Request error for {self.source.value} at {url}: {e}")
            raise FetchError(f"Request failed: {e}") from e
        except RetryableStatusError:
            logger.error(
                f"Giving up on {url} for {self.source.value} after {settings.fetch_attempts} attempt(s)"
            )
            raise

        logger.debug(f"Request successful: {response.status_code} for {url}")
        return BeautifulSoup(response.text, "html.parser")

    async def close(self):
        """Closes the underlying HTTP client."""
        await self.client.aclose()
        logger.info(f"Closed HTTP client for {self.source.value}")
