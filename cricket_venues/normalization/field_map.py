"""Canonical field table: which source keys feed which output field.

Every key listed here is consumed by the merge; none of them is ever passed
through to the output under its source spelling.
"""

from typing import Dict, FrozenSet, Iterator, Tuple

from cricket_venues.models.enums import CanonicalField, Source

# Merge priority for every field except sArea
SOURCE_PRIORITY: Tuple[Source, ...] = (
    Source.CRICBUZZ,
    Source.ESPN,
    Source.CRICKET_DOT_COM,
)

# sArea keeps its own chain: Cricket.com is consulted before ESPN
AREA_PRIORITY: Tuple[Source, ...] = (
    Source.CRICBUZZ,
    Source.CRICKET_DOT_COM,
    Source.ESPN,
)

FIELD_ALIASES: Dict[CanonicalField, Tuple[str, ...]] = {
    CanonicalField.VENUE_NAME: ("venueName", "Name", "sName"),
    CanonicalField.ALSO_KNOWN_AS: (
        "alsoKnownAs",
        "Also known as",
        "Also knows as",
        "Known as",
        "sKnownAs",
    ),
    CanonicalField.AREA: ("sLocation", "Location", "Country", "country"),
    CanonicalField.TIME_ZONE: (
        "Time Zone",
        "timeZone",
        "sTimezone",
        "time_zone",
        "Time_Zone",
    ),
    CanonicalField.OPENED: (
        "opened",
        "Opened",
        "Established",
        "Establishment",
        "sEstablishment",
    ),
    CanonicalField.CAPACITY: ("Capacity", "capacity"),
    CanonicalField.ENDS: ("ends", "Ends", "Bowling Ends", "End Names"),
    CanonicalField.FLOODLIGHTS: (
        "Flood Lights",
        "Floodlights",
        "Flood lights",
        "floodLights",
        "flood lights",
    ),
    CanonicalField.CURATOR: ("Curator", "curator", "groundsman", "pitchCurator"),
    CanonicalField.PITCH: ("pitch", "pitchType", "pitchCondition", "surface"),
    CanonicalField.HOME_TEAMS: (
        "homeTeams",
        "home_to",
        "homeTo",
        "Home Teams",
        "Home Team",
        "Home to",
        "home to",
    ),
    CanonicalField.OTHER_SPORTS: (
        "otherSports",
        "Other Sports",
        "Other sports",
        "Other_Sports_it_is_home_to",
        "other_sports",
        "sports",
        "sOtherSports",
    ),
}

LIST_FIELDS: FrozenSet[CanonicalField] = frozenset(
    {
        CanonicalField.ALSO_KNOWN_AS,
        CanonicalField.ENDS,
        CanonicalField.HOME_TEAMS,
        CanonicalField.OTHER_SPORTS,
    }
)

CAPACITY_KEYS: Tuple[str, ...] = (CanonicalField.CAPACITY.value,) + FIELD_ALIASES[
    CanonicalField.CAPACITY
]

STATS_KEY = "stats"

# Every key the merge consumes; anything else is passed through
CONSUMED_KEYS: FrozenSet[str] = frozenset(
    [field.value for field in FIELD_ALIASES]
    + [alias for aliases in FIELD_ALIASES.values() for alias in aliases]
    + [STATS_KEY]
)


def keys_for(field: CanonicalField) -> Tuple[str, ...]:
    """Canonical key first, then its aliases in lookup order."""
    return (field.value,) + FIELD_ALIASES[field]


def candidates(field: CanonicalField) -> Iterator[Tuple[Source, str]]:
    """Yields (source, key) pairs in the order a scalar field is resolved.

    Every source is asked for the canonical key first; only when none has it
    are the aliases searched, source by source.
    """
    if field is CanonicalField.AREA:
        for source in AREA_PRIORITY:
            for key in keys_for(field):
                yield source, key
        return

    for source in SOURCE_PRIORITY:
        yield source, field.value
    for source in SOURCE_PRIORITY:
        for alias in FIELD_ALIASES[field]:
            yield source, alias
