from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import Source


class MatchRecord(BaseModel):
    """One stat sub-record: first/recent match or highest/lowest team score."""

    date: str = ""
    year: str = ""
    teams: str = ""
    matchResult: str = ""
    score: Optional[str] = None  # Only set on highest/lowest team score


class ThirdPartySources(BaseModel):
    """The `oThirdparty` block of a catalog entry."""

    model_config = ConfigDict(extra="ignore")

    cricbuzzUrl: Optional[str] = None
    espnUrl: Optional[str] = None
    cricketDotComUrl: Optional[str] = None

    def url_for(self, source: Source) -> Optional[str]:
        url = {
            Source.CRICBUZZ: self.cricbuzzUrl,
            Source.ESPN: self.espnUrl,
            Source.CRICKET_DOT_COM: self.cricketDotComUrl,
        }[source]
        if isinstance(url, str) and url.strip():
            return url.strip()
        return None


class ScrapeMarker(BaseModel):
    """Serialized as `oScraped` on every entry the batch touched."""

    model_config = ConfigDict(frozen=True)

    bResult: bool
    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )
