from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Dict, List, Union

from loguru import logger

from teamfeed.aggregation.aggregator import TeamAggregator
from teamfeed.api.schemas import TeamListResponse, TeamsResponse
from teamfeed.errors import RequestValidationError
from teamfeed.models.team import Team
from teamfeed.registry.leagues import all_leagues, available_sports
from teamfeed.search.index import SearchIndex


class TeamsService:
    """Inbound query surface over the aggregator."""

    def __init__(self, aggregator: TeamAggregator):
        self.aggregator = aggregator

    async def get_teams(self, leagues: Union[str, Iterable]) -> TeamsResponse:
        """Fetches one or many leagues; per-league failures are itemized."""
        league_ids = _league_ids(leagues)
        aggregation = await self.aggregator.fetch_leagues(league_ids)
        return TeamsResponse(
            results=aggregation.results,
            errors=aggregation.errors,
            total_sports=len(league_ids),
            successful_sports=sum(
                1 for league in aggregation.results if league not in aggregation.errors
            ),
            last_updated=aggregation.fetched_at,
        )

    async def get_team_list(self, league: str) -> TeamListResponse:
        """Fetches a single league.

        Raises:
            LeagueNotFoundError: If the league is not registered.
        """
        result = await self.aggregator.fetch_league(league)
        return TeamListResponse(
            sport=league,
            team_count=len(result.teams),
            teams=result.teams,
            last_updated=datetime.now(timezone.utc),
            error=result.error,
        )

    async def search_teams(self, query: str) -> List[Team]:
        """Searches every registered league; a blank query fetches nothing."""
        if not query or not query.strip():
            return []
        aggregation = await self.aggregator.fetch_leagues(all_leagues())
        matches = SearchIndex.from_results(aggregation.results).search(query)
        logger.info(f"Search '{query}' matched {len(matches)} teams")
        return matches

    async def teams_by_category(self) -> Dict[str, Dict[str, List[Team]]]:
        """Groups every league's roster under its sport category."""
        categories = available_sports()
        aggregation = await self.aggregator.fetch_leagues(
            league for category in categories for league in category.leagues
        )
        return {
            category.id: {
                league: aggregation.results.get(league, [])
                for league in category.leagues
            }
            for category in categories
        }


def _league_ids(leagues) -> List[str]:
    if isinstance(leagues, str):
        return [leagues]
    if not isinstance(leagues, Iterable) or isinstance(leagues, (bytes, dict)):
        raise RequestValidationError("Sports parameter must be an array")
    league_ids = list(dict.fromkeys(leagues))
    if not all(isinstance(league, str) for league in league_ids):
        raise RequestValidationError("Sports parameter must be an array of ids")
    return league_ids