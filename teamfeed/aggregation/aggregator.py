import asyncio
from typing import Iterable, List, Optional, Union

from loguru import logger

from teamfeed.data.offline import offline_teams
from teamfeed.errors import LeagueNotFoundError, TransportFailure
from teamfeed.models.enums import FetchOutcome
from teamfeed.models.fetch import AggregationResult, LeagueFetchResult
from teamfeed.models.league import FeedLocator
from teamfeed.normalization.normalizer import Normalizer
from teamfeed.registry.leagues import resolve_feed
from teamfeed.scrapers.base_scraper import BaseScraper, describe_request_error
from teamfeed.scrapers.espn_scraper import EspnTeamsScraper

LeagueIds = Union[str, Iterable[str]]


class TeamAggregator:
    """Fetches many leagues concurrently and isolates their failures.

    Each known league becomes one independent task; ``asyncio.gather`` is the
    only join point and every task returns its own ``LeagueFetchResult``, so
    no league can abort, delay or overwrite a sibling. A league whose fetch
    fails is reported in ``errors`` and still gets a renderable roster from
    the offline dataset.
    """

    def __init__(
        self,
        scraper: Optional[BaseScraper] = None,
        normalizer: Optional[Normalizer] = None,
        timeout: Optional[float] = None,
    ):
        self.scraper = scraper or EspnTeamsScraper()
        self.normalizer = normalizer or Normalizer()
        self.timeout = timeout if timeout is not None else self.scraper.timeout

    async def fetch_leagues(self, league_ids: LeagueIds) -> AggregationResult:
        """Fetches teams for every requested league.

        Never raises for per-league problems: unknown leagues land in
        ``errors`` as "league not found" without a network call, and failed
        fetches land in both ``errors`` and ``results`` (offline roster).
        """
        requested = _dedupe(league_ids)
        aggregation = AggregationResult()

        locators: List[FeedLocator] = []
        unknown: List[str] = []
        for league in requested:
            try:
                locators.append(resolve_feed(league))
            except LeagueNotFoundError as e:
                unknown.append(league)
                aggregation.errors[league] = str(e)
                logger.warning(f"Requested unknown league '{league}'")

        logger.info(
            f"Fetching {len(locators)} league(s) concurrently"
            + (f"; {len(unknown)} unknown" if unknown else "")
        )
        fetched = await asyncio.gather(
            *(self._fetch_league(locator) for locator in locators)
        )

        for result in fetched:
            aggregation.results[result.league] = result.teams
            aggregation.outcomes[result.league] = result.outcome
            if result.error is not None:
                aggregation.errors[result.league] = result.error

        failed = sum(1 for result in fetched if result.failed)
        logger.info(
            f"Aggregation finished: {len(fetched) - failed} ok, {failed} degraded, "
            f"{len(unknown)} not found."
        )
        return aggregation

    async def fetch_league(self, league_id: str) -> LeagueFetchResult:
        """Fetches a single league.

        Raises:
            LeagueNotFoundError: If the league is not registered.
        """
        return await self._fetch_league(resolve_feed(league_id))

    async def _fetch_league(self, locator: FeedLocator) -> LeagueFetchResult:
        league = locator.league
        try:
            payload = await asyncio.wait_for(
                self.scraper.fetch_payload(locator), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            return self._fallback(league, f"Feed request timed out after {self.timeout:g}s")
        except TransportFailure as e:
            return self._fallback(league, str(e) or e.__class__.__name__)
        except Exception as e:
            logger.exception(f"Unexpected error fetching {league}: {e}")
            return self._fallback(league, describe_request_error(e))

        teams = self.normalizer.normalize(league, payload)
        logger.info(f"Fetched {len(teams)} teams for {league}")
        return LeagueFetchResult(league=league, teams=teams, outcome=FetchOutcome.OK)

    def _fallback(self, league: str, message: str) -> LeagueFetchResult:
        teams = offline_teams(league)
        outcome = (
            FetchOutcome.FAILED_WITH_FALLBACK if teams else FetchOutcome.FAILED_EMPTY
        )
        logger.warning(
            f"Feed for {league} failed ({message}); serving {len(teams)} offline teams"
        )
        return LeagueFetchResult(league=league, teams=teams, outcome=outcome, error=message)

    async def close(self):
        await self.scraper.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.close()


def _dedupe(league_ids: LeagueIds) -> List[str]:
    if isinstance(league_ids, str):
        return [league_ids]
    return list(dict.fromkeys(league_ids))
