"""
Tests for the venue page scrapers against canned HTML.

Run: pytest tests/test_scrapers.py -v
"""
from typing import Callable, Dict

import httpx
import pytest

from cricket_venues.config.settings import settings
from cricket_venues.normalization.normalizer import Normalizer
from cricket_venues.scrapers.base_scraper import FetchError, ParseError
from cricket_venues.scrapers.cricbuzz_scraper import CricbuzzScraper
from cricket_venues.scrapers.cricketdotcom_scraper import CricketDotComScraper
from cricket_venues.scrapers.espn_scraper import ESPNScraper


ESPN_URL = "https://www.espncricinfo.com/cricket-grounds/eden-gardens-57980"
CRICBUZZ_URL = "https://www.cricbuzz.com/cricket-series/venue/31/eden-gardens"
CRICBUZZ_MATCH_PATH = "/live-cricket-scores/123/eng-vs-ind"
CRICKET_DOT_COM_URL = "https://www.cricket.com/venues/eden-gardens"

ESPN_HTML = """
<html><head><title>Eden Gardens, Kolkata | Cricket Grounds | ESPNcricinfo</title></head>
<body><table>
<tr><td>Also knows as</td><td>Eden, The Eden</td></tr>
<tr><td>Established</td><td>1864</td></tr>
<tr><td>Capacity</td><td>68,000</td></tr>
<tr><td>End Names</td><td>High Court End, Club House End</td></tr>
<tr><td>Flood Lights</td><td>Yes</td></tr>
<tr><td>Home Teams</td><td>Bengal, Kolkata Knight Riders</td></tr>
<tr><td>Other Sports</td><td>Football as well as Hockey</td></tr>
<tr><td>Curator</td><td>Sujan Mukherjee</td></tr>
</table></body></html>
"""

CRICBUZZ_HTML = """
<html><body>
<h1>Eden Gardens</h1>
<table>
<tr><td>Opened</td><td>1864</td></tr>
<tr><td>Capacity</td><td>68,000</td></tr>
<tr><td>Ends</td><td>High Court End, Club House End</td></tr>
<tr><td>Location</td><td>Kolkata, India</td></tr>
<tr><td>Time Zone</td><td>UTC +05:30</td></tr>
<tr><td>Home to</td><td>Bengal, Kolkata Knight Riders</td></tr>
<tr><td>Floodlights</td><td>Yes</td></tr>
<tr><td>Also known as</td><td>Eden</td></tr>
</table>
<h2>ODI Stats</h2>
<table>
<tr><td>Total matches</td><td>38</td></tr>
<tr><td>Highest total recorded</td><td>404/5 (50 Ov) by IND vs SL</td></tr>
<tr><td>Lowest total recorded</td><td><a href="/live-cricket-scores/123/eng-vs-ind">123/10 (40 Ov) by ENG vs IND</a></td></tr>
</table>
</body></html>
"""

CRICBUZZ_MATCH_HTML = """
<html><body>
<h1>England vs India, 2nd ODI - Live Cricket Score, Commentary</h1>
<div class="cb-nav-subhdr">Series: India tour 2023</div>
<div class="cb-mat-info">Date: Feb 12, 2023 Venue: Eden Gardens</div>
<div class="cb-min-stts">India won by 5 wkts</div>
</body></html>
"""

CRICKET_DOT_COM_HTML = """
<html><body>
<p class="text-text-header/60 md:text-sm text-xs font-semibold">Eden Gardens, Kolkata</p>
<div class="bg-foreGround px-4 pb-2 rounded-md">
  <div class="flex items-center py-2 gap-2"><p>Country :</p><p>India</p></div>
  <div class="flex items-center py-2 gap-2"><p>Capacity :</p><p>66,000</p></div>
  <div class="flex items-center py-2 gap-2"><p>Flood Lights :</p><p>Yes</p></div>
  <div class="flex items-center py-2 gap-2"><p>Bowling Ends :</p><p>-</p></div>
</div>
<section id="test-stats">
  <div><p>Highest Total</p><p>657/7 AUS vs IND 2001</p></div>
  <div><p>First Match</p><p>India vs England, 05 Jan 1934</p></div>
</section>
</body></html>
"""


def _client(routes: Dict[str, Callable[[httpx.Request], httpx.Response]]) -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        route = routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, text="not found")
        return route(request)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _html(body: str) -> Callable[[httpx.Request], httpx.Response]:
    return lambda request: httpx.Response(200, text=body)


# ── ESPN ────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_espn_parses_ground_page() -> None:
    scraper = ESPNScraper(client=_client({httpx.URL(ESPN_URL).path: _html(ESPN_HTML)}))
    try:
        record = await scraper.fetch_venue(ESPN_URL)
    finally:
        await scraper.close()

    assert record["venueName"] == "Eden Gardens"
    assert record["alsoKnownAs"] == ["Eden", "The Eden"]
    assert record["opened"] == "1864"
    assert record["capacity"] == "68,000"
    assert record["ends"] == ["High Court End", "Club House End"]
    assert record["floodLights"] == "Yes"
    assert record["homeTeams"] == ["Bengal", "Kolkata Knight Riders"]
    assert record["otherSports"] == ["Football", "Hockey"]
    assert record["curator"] == "Sujan Mukherjee"
    assert record["pitch"] == ""


@pytest.mark.asyncio
async def test_espn_record_merges_cleanly() -> None:
    scraper = ESPNScraper(client=_client({httpx.URL(ESPN_URL).path: _html(ESPN_HTML)}))
    try:
        record = await scraper.fetch_venue(ESPN_URL)
    finally:
        await scraper.close()

    merged = Normalizer().merge({}, record, {})
    assert merged["sVenueName"] == "Eden Gardens"
    assert merged["sOpened"] == "1864"
    assert merged["sCapacity"] == "68000"
    assert merged["sFloodlights"] == "Yes"
    assert merged["sCurator"] == "Sujan Mukherjee"
    assert "sPitch" not in merged
    assert "dimensions" not in merged


@pytest.mark.asyncio
async def test_http_error_raises_fetch_error() -> None:
    scraper = ESPNScraper(client=_client({}))
    try:
        with pytest.raises(FetchError):
            await scraper.fetch_venue(ESPN_URL)
    finally:
        await scraper.close()


@pytest.mark.asyncio
async def test_server_error_raises_fetch_error() -> None:
    path = httpx.URL(ESPN_URL).path
    scraper = ESPNScraper(client=_client({path: lambda r: httpx.Response(503)}))
    try:
        with pytest.raises(FetchError):
            await scraper.fetch_venue(ESPN_URL)
    finally:
        await scraper.close()


@pytest.mark.asyncio
async def test_network_error_raises_fetch_error() -> None:
    def boom(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    scraper = ESPNScraper(client=httpx.AsyncClient(transport=httpx.MockTransport(boom)))
    try:
        with pytest.raises(FetchError):
            await scraper.fetch_venue(ESPN_URL)
    finally:
        await scraper.close()


@pytest.mark.asyncio
async def test_unrecognised_page_raises_parse_error() -> None:
    path = httpx.URL(ESPN_URL).path
    scraper = ESPNScraper(client=_client({path: _html("<html><body><p>nothing</p></body></html>")}))
    try:
        with pytest.raises(ParseError):
            await scraper.fetch_venue(ESPN_URL)
    finally:
        await scraper.close()


# ── Cricbuzz ────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_cricbuzz_parses_venue_and_stats_from_text() -> None:
    scraper = CricbuzzScraper(
        client=_client({httpx.URL(CRICBUZZ_URL).path: _html(CRICBUZZ_HTML)}),
        follow_match_links=False,
    )
    try:
        record = await scraper.fetch_venue(CRICBUZZ_URL)
    finally:
        await scraper.close()

    assert record["Name"] == "Eden Gardens"
    assert record["Opened"] == "1864"
    assert record["Location"] == "Kolkata, India"
    assert record["Home to"] == "Bengal, Kolkata Knight Riders"
    assert "Total matches" not in record
    assert set(record["stats"]) == {"odi"}

    odi = record["stats"]["odi"]
    assert odi["highestTeamScore"]["score"] == "404/5"
    assert odi["highestTeamScore"]["teams"] == "India vs Sri Lanka"
    assert odi["lowestTeamScore"]["score"] == "123/10"
    assert odi["lowestTeamScore"]["teams"] == "England vs India"


@pytest.mark.asyncio
async def test_cricbuzz_follows_match_links(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "match_detail_delay_seconds", 0)
    scraper = CricbuzzScraper(
        client=_client(
            {
                httpx.URL(CRICBUZZ_URL).path: _html(CRICBUZZ_HTML),
                CRICBUZZ_MATCH_PATH: _html(CRICBUZZ_MATCH_HTML),
            }
        ),
        follow_match_links=True,
    )
    try:
        record = await scraper.fetch_venue(CRICBUZZ_URL)
    finally:
        await scraper.close()

    assert record["stats"]["odi"]["lowestTeamScore"] == {
        "date": "Feb 12",
        "year": "2023",
        "teams": "England vs India",
        "matchResult": "India won by 5 wkts",
        "score": "123/10",
    }


@pytest.mark.asyncio
async def test_cricbuzz_match_link_failure_falls_back_to_text(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "match_detail_delay_seconds", 0)
    scraper = CricbuzzScraper(
        client=_client({httpx.URL(CRICBUZZ_URL).path: _html(CRICBUZZ_HTML)}),
        follow_match_links=True,
    )
    try:
        record = await scraper.fetch_venue(CRICBUZZ_URL)
    finally:
        await scraper.close()

    lowest = record["stats"]["odi"]["lowestTeamScore"]
    assert lowest["teams"] == "England vs India"
    assert lowest["score"] == "123/10"


@pytest.mark.asyncio
async def test_cricbuzz_record_merges_cleanly() -> None:
    scraper = CricbuzzScraper(
        client=_client({httpx.URL(CRICBUZZ_URL).path: _html(CRICBUZZ_HTML)}),
        follow_match_links=False,
    )
    try:
        record = await scraper.fetch_venue(CRICBUZZ_URL)
    finally:
        await scraper.close()

    merged = Normalizer().merge(record, {}, {})
    assert merged["sVenueName"] == "Eden Gardens"
    assert merged["sArea"] == "Kolkata, India"
    assert merged["sTimeZone"] == "UTC +05:30"
    assert merged["sCapacity"] == "68000"
    assert merged["aEnds"] == ["High Court End", "Club House End"]
    assert merged["aHomeTeams"] == ["Bengal", "Kolkata Knight Riders"]
    assert merged["aAlsoKnownAs"] == ["Eden"]
    assert merged["stats"]["odi"]["highestTeamScore"] == {
        "teams": "India vs Sri Lanka",
        "score": "404/5",
    }


# ── Cricket.com ─────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_cricket_dot_com_parses_card_and_stats() -> None:
    seen_headers = {}

    def page(request: httpx.Request) -> httpx.Response:
        seen_headers.update(request.headers)
        return httpx.Response(200, text=CRICKET_DOT_COM_HTML)

    scraper = CricketDotComScraper(
        client=_client({httpx.URL(CRICKET_DOT_COM_URL).path: page})
    )
    try:
        record = await scraper.fetch_venue(CRICKET_DOT_COM_URL)
    finally:
        await scraper.close()

    assert seen_headers["referer"] == "https://www.cricket.com/"
    assert record["venueName"] == "Eden Gardens"
    assert record["Country"] == "India"
    assert record["Capacity"] == "66,000"
    assert record["Flood Lights"] == "Yes"
    assert "Bowling Ends" not in record
    assert record["country"] == "India"
    assert record["floodLights"] == "Yes"

    test_stats = record["stats"]["test"]
    assert test_stats["highestTeamScore"] == {
        "date": "",
        "year": "2001",
        "teams": "AUS vs IND",
        "matchResult": "",
        "score": "657/7",
    }
    assert test_stats["firstTest"] == {
        "date": "05 Jan 1934",
        "year": "1934",
        "teams": "India vs England",
        "matchResult": "",
    }
