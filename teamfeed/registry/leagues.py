# teamfeed/registry/leagues.py
"""Static league and sport-category tables.

Adding a league means adding a row to ``LEAGUE_FEED_PATHS`` and
``LEAGUE_NAMES`` (and listing it under a category); nothing else changes.
"""

from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Tuple

from teamfeed.config.settings import settings
from teamfeed.errors import LeagueNotFoundError
from teamfeed.models.league import FeedLocator, SportCategory

# League id -> feed path relative to settings.feed_base_url
LEAGUE_FEED_PATHS: Mapping[str, str] = MappingProxyType(
    {
        "nfl": "football/nfl/teams",
        "college-football": "football/college-football/teams",
        "nba": "basketball/nba/teams",
        "wnba": "basketball/wnba/teams",
        "mens-college-basketball": "basketball/mens-college-basketball/teams",
        "womens-college-basketball": "basketball/womens-college-basketball/teams",
        "mlb": "baseball/mlb/teams",
        "nhl": "hockey/nhl/teams",
        # Soccer leagues
        "mls": "soccer/usa.1/teams",
        "premier-league": "soccer/eng.1/teams",
        "la-liga": "soccer/esp.1/teams",
        "bundesliga": "soccer/ger.1/teams",
        "serie-a": "soccer/ita.1/teams",
        "ligue-1": "soccer/fra.1/teams",
    }
)

LEAGUE_NAMES: Mapping[str, str] = MappingProxyType(
    {
        "nfl": "NFL",
        "college-football": "College Football",
        "nba": "NBA",
        "wnba": "WNBA",
        "mens-college-basketball": "Men's College Basketball",
        "womens-college-basketball": "Women's College Basketball",
        "mlb": "MLB",
        "nhl": "NHL",
        "mls": "MLS",
        "premier-league": "Premier League",
        "la-liga": "La Liga",
        "bundesliga": "Bundesliga",
        "serie-a": "Serie A",
        "ligue-1": "Ligue 1",
    }
)

SPORT_CATEGORIES: Tuple[SportCategory, ...] = (
    SportCategory(id="football", name="Football", leagues=("nfl", "college-football")),
    SportCategory(
        id="basketball",
        name="Basketball",
        leagues=(
            "nba",
            "wnba",
            "mens-college-basketball",
            "womens-college-basketball",
        ),
    ),
    SportCategory(id="baseball", name="Baseball", leagues=("mlb",)),
    SportCategory(id="hockey", name="Hockey", leagues=("nhl",)),
    SportCategory(
        id="soccer",
        name="Soccer",
        leagues=("mls", "premier-league", "la-liga", "bundesliga", "serie-a", "ligue-1"),
    ),
)

_CATEGORIES_BY_ID: Mapping[str, SportCategory] = MappingProxyType(
    {category.id: category for category in SPORT_CATEGORIES}
)
_CATEGORY_BY_LEAGUE: Mapping[str, SportCategory] = MappingProxyType(
    {league: category for category in SPORT_CATEGORIES for league in category.leagues}
)


def resolve_feed(league_id: str, base_url: Optional[str] = None) -> FeedLocator:
    """Looks up the feed locator for a league.

    Raises:
        LeagueNotFoundError: If the league is not registered.
    """
    path = LEAGUE_FEED_PATHS.get(league_id)
    if path is None:
        raise LeagueNotFoundError(league_id)
    base = (base_url or settings.feed_base_url).rstrip("/")
    return FeedLocator(
        league=league_id, url=f"{base}/{path}", display_name=league_name(league_id)
    )


def all_leagues() -> List[str]:
    return list(LEAGUE_FEED_PATHS)


def league_name(league_id: str) -> str:
    return LEAGUE_NAMES.get(league_id, league_id)


def available_sports() -> Tuple[SportCategory, ...]:
    return SPORT_CATEGORIES


def get_category(category_id: str) -> Optional[SportCategory]:
    return _CATEGORIES_BY_ID.get(category_id)


def category_for_league(league_id: str) -> Optional[SportCategory]:
    return _CATEGORY_BY_LEAGUE.get(league_id)


def is_categorized_league(league_id: str) -> bool:
    """True when the league belongs to some sport category."""
    return league_id in _CATEGORY_BY_LEAGUE


def is_known_sport(sport_id: str) -> bool:
    """Accepts category ids ("football") as well as league ids ("nfl")."""
    return sport_id in _CATEGORIES_BY_ID or sport_id in _CATEGORY_BY_LEAGUE


def leagues_for_sports(sport_ids: Iterable[str]) -> List[str]:
    """Expands category ids into their leagues; league ids pass through.

    Order follows first appearance, without duplicates.
    """
    leagues: List[str] = []
    for sport_id in sport_ids:
        category = _CATEGORIES_BY_ID.get(sport_id)
        expanded = category.leagues if category else (sport_id,)
        for league in expanded:
            if league not in leagues:
                leagues.append(league)
    return leagues
