from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio

from teamfeed.aggregation.aggregator import TeamAggregator
from teamfeed.models.team import Team
from teamfeed.registry.leagues import resolve_feed
from teamfeed.scrapers.espn_scraper import EspnTeamsScraper
from teamfeed.storage.memory_store import InMemoryPreferenceStore


def espn_team(
    team_id: str,
    name: str,
    display_name: str,
    abbreviation: str,
    location: str,
    color: Optional[str] = None,
    alternate_color: Optional[str] = None,
    logos: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    team: Dict[str, Any] = {
        "id": team_id,
        "uid": f"s:20~t:{team_id}",
        "name": name,
        "displayName": display_name,
        "shortDisplayName": name,
        "abbreviation": abbreviation,
        "location": location,
        "isActive": True,
    }
    if color is not None:
        team["color"] = color
    if alternate_color is not None:
        team["alternateColor"] = alternate_color
    if logos is not None:
        team["logos"] = logos
    return {"team": team}


def espn_payload(*teams: Dict[str, Any]) -> Dict[str, Any]:
    return {"sports": [{"leagues": [{"teams": list(teams)}]}]}


NFL_PAYLOAD = espn_payload(
    espn_team(
        "12",
        "Chiefs",
        "Kansas City Chiefs",
        "KC",
        "Kansas City",
        color="e31837",
        alternate_color="ffb612",
        logos=[
            {"href": "https://a.espncdn.com/kc-small.png", "width": 100, "height": 100},
            {"href": "https://a.espncdn.com/kc-large.png", "width": 500, "height": 500},
        ],
    ),
    espn_team("2", "Bills", "Buffalo Bills", "BUF", "Buffalo", color="00338d"),
)

NHL_PAYLOAD = espn_payload(
    espn_team("21", "Maple Leafs", "Toronto Maple Leafs", "TOR", "Toronto", color="00205b"),
    espn_team("10", "Rangers", "New York Rangers", "NYR", "New York", color="0038a8"),
)


Handler = Callable[[httpx.Request], Any]


class FeedRouter:
    """MockTransport handler that routes by league path and records calls."""

    def __init__(self):
        self.routes: Dict[str, Handler] = {}
        self.calls: List[str] = []

    def add(self, league: str, handler: Handler) -> None:
        self.routes[resolve_feed(league).url] = handler

    def json(self, league: str, payload: Any, status_code: int = 200) -> None:
        self.add(league, lambda request: httpx.Response(status_code, json=payload))

    def status(self, league: str, status_code: int) -> None:
        self.add(league, lambda request: httpx.Response(status_code))

    async def __call__(self, request: httpx.Request):
        url = str(request.url)
        self.calls.append(url)
        handler = self.routes.get(url)
        if handler is None:
            return httpx.Response(404)
        response = handler(request)
        if not isinstance(response, httpx.Response):
            response = await response
        return response


def dump_teams(teams: Dict[str, List[Team]]) -> Dict[str, List[Dict[str, Any]]]:
    """Full field-by-field view of a league -> teams mapping."""
    return {league: [team.model_dump() for team in selected] for league, selected in teams.items()}


@pytest.fixture
def feed_router():
    return FeedRouter()


@pytest_asyncio.fixture
async def aggregator(feed_router):
    client = httpx.AsyncClient(transport=httpx.MockTransport(feed_router))
    scraper = EspnTeamsScraper(client=client, timeout=2.0, max_attempts=1)
    aggregator = TeamAggregator(scraper=scraper, timeout=0.5)
    yield aggregator
    await client.aclose()


@pytest.fixture
def team_a():
    return Team(
        id="12",
        league="nfl",
        name="Chiefs",
        display_name="Kansas City Chiefs",
        abbreviation="KC",
        location="Kansas City",
        logo_url="https://a.espncdn.com/kc-large.png",
        primary_color="#e31837",
        secondary_color="#ffb612",
    )


@pytest.fixture
def team_b():
    return Team(
        id="10",
        league="nhl",
        name="Rangers",
        display_name="New York Rangers",
        abbreviation="NYR",
        location="New York",
    )


class FakeClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: Optional[datetime] = None):
        self.current = start or datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        now = self.current
        self.current = self.current + timedelta(seconds=1)
        return now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_store():
    return InMemoryPreferenceStore(user_ids=["user-1", "user-2"])


STORED_PREFERENCE = {
    "sports": ["football"],
    "teams": {"nfl": [{"id": "12", "league": "nfl", "name": "Chiefs"}]},
    "updatedAt": "2026-01-01T00:00:00Z",
}
