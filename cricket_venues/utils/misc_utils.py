# cricket_venues/utils/misc_utils.py
import re
import time
from typing import Any, Dict, Optional

TEAM_NAMES = {
    "IND": "India",
    "ENG": "England",
    "AUS": "Australia",
    "RSA": "South Africa",
    "WI": "West Indies",
    "NZ": "New Zealand",
    "PAK": "Pakistan",
    "SL": "Sri Lanka",
    "AFG": "Afghanistan",
    "BAN": "Bangladesh",
    "ZIM": "Zimbabwe",
    "IRE": "Ireland",
    "INDW": "India Women",
    "ENGW": "England Women",
    "AUSW": "Australia Women",
    "NZW": "New Zealand Women",
    "WIW": "West Indies Women",
}

# e.g. "241/4 (20 Ov) by AUS vs WI"
MATCH_INFO_PATTERN = re.compile(
    r"(\d+(?:/\d+)?)\s*\(([^)]+)\)\s*by\s*([A-Za-z\s]+?)\s*vs\s*([A-Za-z\s]+)",
    re.IGNORECASE,
)


def normalize_venue_name(name: Optional[str]) -> str:
    """Generates a file-safe slug for a venue name."""
    if not name or name == "Unknown Venue":
        return f"venue_{int(time.time() * 1000)}"

    normalized = re.sub(r"[^a-z0-9\s-]", "", name.lower())
    normalized = re.sub(r"\s+", " ", normalized).strip()

    # Short names get a timestamp to avoid clobbering each other
    if len(normalized) < 3:
        normalized = f"{normalized}_{int(time.time() * 1000)}"

    normalized = normalized.replace(" ", "-")
    normalized = re.sub(r"-{2,}", "-", normalized)
    return normalized.strip("-")


def team_full_name(code: str) -> str:
    return TEAM_NAMES.get(code.strip().upper(), code.strip())


def parse_match_info(stat_text: Optional[str]) -> Optional[Dict[str, Any]]:
    """Parses a score line like "241/4 (20 Ov) by AUS vs WI"."""
    if not stat_text:
        return None
    match = MATCH_INFO_PATTERN.search(stat_text)
    if not match:
        return None
    team1, team2 = match.group(3).strip(), match.group(4).strip()
    return {
        "score": match.group(1),
        "overs": match.group(2).strip(),
        "team1": team1,
        "team2": team2,
        "teams": f"{team_full_name(team1)} vs {team_full_name(team2)}",
    }
