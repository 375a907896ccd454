from enum import Enum


class Source(str, Enum):
    """Venue data sources, declared in merge priority order."""

    CRICBUZZ = "cricbuzz"
    ESPN = "espn"
    CRICKET_DOT_COM = "cricketDotCom"


class MatchFormat(str, Enum):
    TEST = "test"
    ODI = "odi"
    T20 = "t20"

    @property
    def label(self) -> str:
        """Capitalised form used inside stat keys, e.g. 'Odi' in 'firstOdi'."""
        return self.value.capitalize()


class CanonicalField(str, Enum):
    VENUE_NAME = "sVenueName"
    ALSO_KNOWN_AS = "aAlsoKnownAs"
    AREA = "sArea"
    TIME_ZONE = "sTimeZone"
    OPENED = "sOpened"
    CAPACITY = "sCapacity"
    ENDS = "aEnds"
    FLOODLIGHTS = "sFloodlights"
    CURATOR = "sCurator"
    PITCH = "sPitch"
    HOME_TEAMS = "aHomeTeams"
    OTHER_SPORTS = "aOtherSports"
