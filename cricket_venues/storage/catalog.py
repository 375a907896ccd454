# cricket_venues/storage/catalog.py
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger

from cricket_venues.config.settings import settings
from cricket_venues.models.enums import Source
from cricket_venues.utils.misc_utils import normalize_venue_name


class CatalogError(Exception):
    """Raised when the venue catalog cannot be read or written."""

    pass


def read_catalog(path: Path) -> List[Dict[str, Any]]:
    """Loads the venue catalog (a JSON array of objects)."""
    logger.info(f"Reading venues from: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            venues = json.load(f)
    except (IOError, OSError) as e:
        raise CatalogError(f"Failed to read catalog {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise CatalogError(f"Catalog {path} is not valid JSON: {e}") from e

    if not isinstance(venues, list):
        raise CatalogError(
            f"Catalog {path} must hold a JSON array, got {type(venues).__name__}"
        )
    logger.info(f"Found {len(venues)} venues to process.")
    return venues


def write_catalog(path: Path, venues: List[Dict[str, Any]]) -> None:
    """Overwrites the catalog in one go; the old file survives a failed write."""
    path = Path(path)
    try:
        payload = json.dumps(venues, indent=2, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise CatalogError(f"Catalog data is not JSON serializable: {e}") from e

    tmp_name: Optional[str] = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(payload)
        os.replace(tmp_name, path)
    except (IOError, OSError) as e:
        if tmp_name and os.path.exists(tmp_name):
            os.remove(tmp_name)
        raise CatalogError(f"Failed to write catalog {path}: {e}") from e
    logger.success(f"Successfully updated {path} ({len(venues)} venues)")


def has_meaningful_data(record: Dict[str, Any]) -> bool:
    """True when at least one value is a non-blank string, non-empty container or truthy."""
    for value in record.values():
        if isinstance(value, str):
            if value.strip():
                return True
        elif isinstance(value, (list, dict)):
            if value:
                return True
        elif value:
            return True
    return False


def save_raw_response(
    source: Source, venue_name: Optional[str], record: Dict[str, Any]
) -> Optional[Path]:
    """Dumps one adapter's record to raw_response_dir when enabled."""
    if not settings.save_raw_responses:
        return None
    if not isinstance(record, dict) or not has_meaningful_data(record):
        logger.debug(f"Nothing worth saving from {source.value} for {venue_name}")
        return None

    try:
        settings.raw_response_dir.mkdir(parents=True, exist_ok=True)
        filename = (
            settings.raw_response_dir
            / f"{source.value}_{normalize_venue_name(venue_name)}.json"
        )
        with open(filename, "w", encoding="utf-8") as f:
            json.dump(record, f, indent=2, ensure_ascii=False)
        logger.info(f"Saved raw response for {source.value} to {filename}")
        return filename
    except Exception as e:
        logger.exception(
            f"Failed to save raw response for {source.value} to file: {e}"
        )
        return None
