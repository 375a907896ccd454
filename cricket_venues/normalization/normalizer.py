import copy
import math
import re
from typing import Any, Dict, Iterable, List, Optional, Tuple

from loguru import logger

from cricket_venues.models.enums import CanonicalField, MatchFormat, Source
from cricket_venues.models.venue import MatchRecord
from cricket_venues.normalization.cleanup import clean_value, cleanup, is_empty
from cricket_venues.normalization.field_map import (
    CAPACITY_KEYS,
    CONSUMED_KEYS,
    LIST_FIELDS,
    SOURCE_PRIORITY,
    STATS_KEY,
    candidates,
    keys_for,
)

# Type alias for a source record keyed however the site happens to label things
RawVenueRecord = Dict[str, Any]

MAX_CAPACITY_DIGITS = 6

# (alternate spelling, canonical key) promoted during the per-source pass
PROMOTED_KEYS: Tuple[Tuple[str, str], ...] = (
    ("Opened", "opened"),
    ("Curator", CanonicalField.CURATOR.value),
    ("floodLights", CanonicalField.FLOODLIGHTS.value),
)


def normalize_capacity(value: str) -> str:
    """Reduces free-text capacity to digits; '' means unknown.

    "1,00,000 (renovated)" -> "100000", "000000" -> "".
    """
    cleaned = re.sub(r"\([^)]*\)", "", value)
    cleaned = re.sub(r"[^\d,]", "", cleaned).replace(",", "")
    if len(cleaned) > MAX_CAPACITY_DIGITS:
        cleaned = cleaned[:MAX_CAPACITY_DIGITS]
    if not cleaned or set(cleaned) == {"0"}:
        return ""
    return cleaned


def is_present(value: Any) -> bool:
    """Not blank, not "N/A", and not an empty container."""
    if is_empty(value):
        return False
    if isinstance(value, str) and value.strip().upper() == "N/A":
        return False
    return True


def split_values(value: Any) -> List[str]:
    """Flattens a list-field value: strings split on commas, lists taken per item."""
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, (list, tuple)):
        items = []
        for item in value:
            if isinstance(item, str):
                item = item.strip()
            elif isinstance(item, (int, float)) and not isinstance(item, bool):
                item = str(item)
            else:
                continue
            if item:
                items.append(item)
        return items
    return []


def dedupe(values: Iterable[str]) -> List[str]:
    """Exact-match dedup after trimming, first occurrence wins."""
    seen = set()
    result = []
    for value in values:
        value = value.strip()
        if value and value not in seen:
            seen.add(value)
            result.append(value)
    return result


def _text(value: Any) -> str:
    if isinstance(value, bool) or value is None:
        return ""
    if isinstance(value, (str, int, float)):
        return str(value).strip()
    return ""


def stat_keys(match_format: MatchFormat) -> Tuple[str, str, str, str]:
    label = match_format.label
    return (f"first{label}", f"recent{label}", "highestTeamScore", "lowestTeamScore")


def reshape_format_stats(
    flat: Dict[str, Any], match_format: MatchFormat
) -> Dict[str, Dict[str, str]]:
    """Turns flattened keys (firstOdiDate, Highest.total, ...) into FormatStats."""
    label = match_format.label
    first_key, recent_key, highest_key, lowest_key = stat_keys(match_format)

    def match_record(prefix: str) -> Dict[str, str]:
        return MatchRecord(
            date=_text(flat.get(f"{prefix}{label}Date")),
            year=_text(flat.get(f"{prefix}{label}Year")),
            teams=_text(flat.get(f"{prefix}{label}Teams")),
            matchResult=_text(flat.get(f"{prefix}{label}Result")),
        ).model_dump(exclude_none=True)

    def team_score(block_key: str) -> Dict[str, str]:
        block = flat.get(block_key)
        if not isinstance(block, dict):
            block = {}
        return MatchRecord(
            score=_text(block.get("total")) or _text(block.get("score")),
            date=_text(block.get("date")),
            year=_text(block.get("year")),
            teams=_text(block.get("teams")),
            matchResult=_text(block.get("result")),
        ).model_dump()

    return {
        first_key: match_record("first"),
        recent_key: match_record("recent"),
        highest_key: team_score("Highest"),
        lowest_key: team_score("Lowest"),
    }


def _pass_through_key(key: str) -> str:
    return re.sub(r"\s+", "_", key.strip())


class Normalizer:
    """Reconciles the three per-site venue records into one canonical record."""

    def __init__(self):
        logger.debug("Normalizer initialized.")

    # --- Per-source pass ---

    def normalize_source(self, raw: Any, source: Source) -> RawVenueRecord:
        """Returns a renamed/reshaped copy of one adapter's record.

        The input is never modified. A non-dict input is treated as an
        empty record.
        """
        if not isinstance(raw, dict):
            if raw is not None:
                logger.warning(
                    f"Ignoring non-dict record from {source.value}: {type(raw).__name__}"
                )
            return {}

        record: RawVenueRecord = copy.deepcopy(raw)
        record.pop("scraped", None)

        known_as = record.get("sKnownAs")
        if isinstance(known_as, str):
            del record["sKnownAs"]
            record["aAlsoKnownAs"] = dedupe(
                split_values(record.get("aAlsoKnownAs")) + split_values(known_as)
            )

        for key in CAPACITY_KEYS:
            capacity = record.get(key)
            if (
                isinstance(capacity, (int, float))
                and not isinstance(capacity, bool)
                and math.isfinite(capacity)
            ):
                capacity = str(int(capacity))
            if isinstance(capacity, str):
                record[key] = normalize_capacity(capacity)

        for alternate, canonical in PROMOTED_KEYS:
            if alternate not in record:
                continue
            value = record.pop(alternate)
            if not is_present(record.get(canonical)):
                record[canonical] = value

        if isinstance(record.get("home to"), str):
            record["home to"] = split_values(record["home to"])

        if record.get("homeTeams") == []:
            del record["homeTeams"]

        if "venueName" in record and CanonicalField.VENUE_NAME.value in record:
            venue_name = record.pop("venueName")
            canonical_name = record[CanonicalField.VENUE_NAME.value]
            if is_present(venue_name) and venue_name != canonical_name:
                record["aAlsoKnownAs"] = dedupe(
                    split_values([venue_name])
                    + split_values(record.get("aAlsoKnownAs"))
                )

        if "oStats" in record:
            o_stats = record.pop("oStats")
            if isinstance(o_stats, dict):
                stats = record.get(STATS_KEY)
                stats = dict(stats) if isinstance(stats, dict) else {}
                for match_format in MatchFormat:
                    flat = o_stats.get(match_format.value)
                    if isinstance(flat, dict) and flat:
                        stats[match_format.value] = reshape_format_stats(
                            flat, match_format
                        )
                record[STATS_KEY] = stats
            else:
                logger.debug(f"Dropping malformed oStats from {source.value}")

        return record

    # --- Merge ---

    def merge(
        self,
        cricbuzz: Optional[RawVenueRecord] = None,
        espn: Optional[RawVenueRecord] = None,
        cricket_dot_com: Optional[RawVenueRecord] = None,
    ) -> Dict[str, Any]:
        """Merges the three source records into a CanonicalVenueRecord.

        Scalars come from the first source in priority order (Cricbuzz, ESPN,
        Cricket.com) holding the canonical key, else from the first alias hit.
        sArea has its own chain (Cricbuzz, Cricket.com, ESPN). List fields
        are the deduplicated union of every source and alias. The result
        never carries empty values.
        """
        records: Dict[Source, RawVenueRecord] = {
            Source.CRICBUZZ: self.normalize_source(cricbuzz, Source.CRICBUZZ),
            Source.ESPN: self.normalize_source(espn, Source.ESPN),
            Source.CRICKET_DOT_COM: self.normalize_source(
                cricket_dot_com, Source.CRICKET_DOT_COM
            ),
        }

        merged: Dict[str, Any] = {}
        for field in CanonicalField:
            if field in LIST_FIELDS:
                value: Any = self._union_list(field, records)
            else:
                value = self._first_present(field, records)
            if field is CanonicalField.CAPACITY and isinstance(value, str):
                value = normalize_capacity(value)
            if is_present(value):
                merged[field.value] = value

        stats = self._merge_stats(records)
        if stats:
            merged[STATS_KEY] = stats

        for key, value in self._pass_through(records, merged).items():
            merged[key] = value

        result = cleanup(merged)
        logger.debug(f"Merged venue record with keys: {list(result.keys())}")
        return result

    def _first_present(
        self, field: CanonicalField, records: Dict[Source, RawVenueRecord]
    ) -> Any:
        for source, key in candidates(field):
            value = clean_value(records[source].get(key))
            if is_present(value):
                logger.trace(f"{field.value} resolved from {source.value}.{key}")
                return value
        return None

    def _union_list(
        self, field: CanonicalField, records: Dict[Source, RawVenueRecord]
    ) -> List[str]:
        values: List[str] = []
        for source in SOURCE_PRIORITY:
            for key in keys_for(field):
                values.extend(split_values(records[source].get(key)))
        return dedupe(values)

    def _merge_stats(
        self, records: Dict[Source, RawVenueRecord]
    ) -> Dict[str, Dict[str, Any]]:
        """Per format and sub-record, the first non-empty source wins."""
        merged_stats: Dict[str, Dict[str, Any]] = {}
        for match_format in MatchFormat:
            picked: Dict[str, Any] = {}
            for source in SOURCE_PRIORITY:
                stats = records[source].get(STATS_KEY)
                if not isinstance(stats, dict):
                    continue
                format_stats = stats.get(match_format.value)
                if not isinstance(format_stats, dict):
                    continue
                for stat_key, sub_record in format_stats.items():
                    if stat_key in picked:
                        continue
                    if isinstance(sub_record, dict):
                        sub_record = cleanup(sub_record)
                    if is_present(sub_record):
                        picked[stat_key] = sub_record

            if picked:
                ordered = [k for k in stat_keys(match_format) if k in picked]
                ordered += sorted(k for k in picked if k not in ordered)
                merged_stats[match_format.value] = {k: picked[k] for k in ordered}
        return merged_stats

    def _pass_through(
        self, records: Dict[Source, RawVenueRecord], merged: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Unmapped keys, whitespace turned into underscores, sorted by key."""
        passed: Dict[str, Any] = {}
        for source in SOURCE_PRIORITY:
            record = records[source]
            for key in sorted(k for k in record if isinstance(k, str)):
                if key in CONSUMED_KEYS:
                    continue
                out_key = _pass_through_key(key)
                if (
                    not out_key
                    or out_key in CONSUMED_KEYS
                    or out_key in merged
                    or out_key in passed
                ):
                    continue
                value = clean_value(record[key])
                if is_present(value):
                    passed[out_key] = value
        return {key: passed[key] for key in sorted(passed)}
