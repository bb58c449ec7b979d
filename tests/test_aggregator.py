import asyncio

import httpx
import pytest

from teamfeed.data.offline import offline_teams
from teamfeed.errors import LeagueNotFoundError
from teamfeed.models.enums import FetchOutcome
from teamfeed.registry.leagues import resolve_feed

from conftest import NFL_PAYLOAD, NHL_PAYLOAD, dump_teams


async def slow_response(request):
    await asyncio.sleep(5)
    return httpx.Response(200, json={})


def connect_error(request):
    raise httpx.ConnectError("connection refused", request=request)


class TestTeamAggregator:
    @pytest.mark.asyncio
    async def test_known_unknown_and_timed_out_leagues(self, aggregator, feed_router):
        feed_router.json("nfl", NFL_PAYLOAD)
        feed_router.add("nba", slow_response)

        result = await aggregator.fetch_leagues({"nfl", "nba", "xfl"})

        assert set(result.results) == {"nfl", "nba"}
        assert [team.abbreviation for team in result.results["nfl"]] == ["KC", "BUF"]
        assert dump_teams({"nba": result.results["nba"]}) == dump_teams(
            {"nba": offline_teams("nba")}
        )
        assert set(result.errors) == {"nba", "xfl"}
        assert "timed out" in result.errors["nba"]
        assert result.errors["xfl"] == "league not found"
        assert result.outcomes == {
            "nfl": FetchOutcome.OK,
            "nba": FetchOutcome.FAILED_WITH_FALLBACK,
        }

    @pytest.mark.asyncio
    async def test_unknown_league_issues_no_request(self, aggregator, feed_router):
        result = await aggregator.fetch_leagues(["xfl", "cricket"])

        assert feed_router.calls == []
        assert result.results == {}
        assert result.errors == {"xfl": "league not found", "cricket": "league not found"}

    @pytest.mark.asyncio
    async def test_failure_does_not_affect_sibling(self, aggregator, feed_router):
        feed_router.json("nhl", NHL_PAYLOAD)
        feed_router.add("nfl", connect_error)

        result = await aggregator.fetch_leagues(["nfl", "nhl"])

        assert [team.abbreviation for team in result.results["nhl"]] == ["TOR", "NYR"]
        assert "nhl" not in result.errors
        assert result.errors["nfl"] == "connection refused"
        assert dump_teams({"nfl": result.results["nfl"]}) == dump_teams(
            {"nfl": offline_teams("nfl")}
        )

    @pytest.mark.asyncio
    async def test_non_success_status_without_offline_data(self, aggregator, feed_router):
        feed_router.status("nhl", 404)

        result = await aggregator.fetch_leagues("nhl")

        assert result.results == {"nhl": []}
        assert result.errors == {"nhl": "Feed responded with status: 404"}
        assert result.outcomes["nhl"] == FetchOutcome.FAILED_EMPTY

    @pytest.mark.asyncio
    async def test_server_error_falls_back(self, aggregator, feed_router):
        feed_router.status("mlb", 503)

        result = await aggregator.fetch_leagues(["mlb"])

        assert result.errors["mlb"] == "Feed responded with status: 503"
        assert [team.abbreviation for team in result.results["mlb"]] == ["NYY", "LAD"]

    @pytest.mark.asyncio
    async def test_malformed_payload_is_not_an_error(self, aggregator, feed_router):
        feed_router.json("nba", {"unexpected": True})
        feed_router.add("nfl", lambda request: httpx.Response(200, text="<html>down</html>"))

        result = await aggregator.fetch_leagues(["nba", "nfl"])

        assert result.results == {"nba": [], "nfl": []}
        assert result.errors == {}

    @pytest.mark.asyncio
    async def test_every_league_failing_still_returns(self, aggregator, feed_router):
        for league in ("nfl", "nba", "nhl"):
            feed_router.add(league, connect_error)

        result = await aggregator.fetch_leagues(["nfl", "nba", "nhl", "xfl"])

        assert set(result.results) == {"nfl", "nba", "nhl"}
        assert set(result.errors) == {"nfl", "nba", "nhl", "xfl"}

    @pytest.mark.asyncio
    async def test_entries_only_for_requested_leagues(self, aggregator, feed_router):
        feed_router.json("nfl", NFL_PAYLOAD)
        feed_router.json("nhl", NHL_PAYLOAD)

        result = await aggregator.fetch_leagues(["nhl"])

        assert set(result.results) == {"nhl"}
        assert feed_router.calls == [resolve_feed("nhl").url]

    @pytest.mark.asyncio
    async def test_fetches_run_concurrently(self, aggregator, feed_router):
        in_flight = 0
        peak = 0

        async def tracked(request):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.05)
            in_flight -= 1
            return httpx.Response(200, json=NHL_PAYLOAD)

        for league in ("nfl", "nba", "mlb", "nhl"):
            feed_router.add(league, tracked)

        await aggregator.fetch_leagues(["nfl", "nba", "mlb", "nhl"])

        assert peak == 4

    @pytest.mark.asyncio
    async def test_fetch_league_single(self, aggregator, feed_router):
        feed_router.json("nfl", NFL_PAYLOAD)

        result = await aggregator.fetch_league("nfl")

        assert result.outcome == FetchOutcome.OK
        assert len(result.teams) == 2
        with pytest.raises(LeagueNotFoundError):
            await aggregator.fetch_league("xfl")

    @pytest.mark.asyncio
    async def test_all_teams_flattens_in_order(self, aggregator, feed_router):
        feed_router.json("nfl", NFL_PAYLOAD)
        feed_router.json("nhl", NHL_PAYLOAD)

        result = await aggregator.fetch_leagues(["nhl", "nfl"])

        assert [team.abbreviation for team in result.all_teams()] == ["TOR", "NYR", "KC", "BUF"]
