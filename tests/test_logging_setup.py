"""
Unit tests for the log record filter.

Run: pytest tests/test_logging_setup.py -v
"""
from cricket_venues.logging.setup import url_query_filter


def test_query_strings_stripped_from_url_extras() -> None:
    record = {
        "extra": {
            "url": "https://www.cricket.com/venues/eden?token=abc&x=1",
            "match_url": "https://www.cricbuzz.com/live-cricket-scores/1?ref=home",
            "source": "espn?not-a-url-key",
        }
    }
    assert url_query_filter(record) is True
    assert record["extra"]["url"] == "https://www.cricket.com/venues/eden"
    assert record["extra"]["match_url"] == "https://www.cricbuzz.com/live-cricket-scores/1"
    assert record["extra"]["source"] == "espn?not-a-url-key"


def test_records_without_extras_pass() -> None:
    assert url_query_filter({}) is True
    assert url_query_filter({"extra": {"url": None}}) is True
