import pytest

from teamfeed.data.offline import OFFLINE_TEAMS
from teamfeed.models.team import Team
from teamfeed.search.index import SearchIndex, search

CORPUS = [team for teams in OFFLINE_TEAMS.values() for team in teams]


class TestSearch:
    @pytest.mark.parametrize("query", ["", "   ", "\t\n"])
    def test_blank_query_returns_nothing(self, query):
        assert search(query, CORPUS) == []

    def test_matches_each_indexed_field(self):
        assert [t.abbreviation for t in search("bills", CORPUS)] == ["BUF"]  # name
        assert [t.abbreviation for t in search("golden state war", CORPUS)] == ["GSW"]  # display name
        assert [t.abbreviation for t in search("los angeles", CORPUS)] == ["LAL", "LAD"]  # location
        assert [t.abbreviation for t in search("nyy", CORPUS)] == ["NYY"]  # abbreviation

    def test_case_insensitive(self):
        assert search("CELTICS", CORPUS) == search("celtics", CORPUS)
        assert len(search("CeLtIcS", CORPUS)) == 1

    def test_keeps_corpus_order(self):
        reversed_corpus = list(reversed(CORPUS))
        assert [t.abbreviation for t in search("los angeles", reversed_corpus)] == ["LAD", "LAL"]

    def test_no_match(self):
        assert search("zzz", CORPUS) == []

    def test_does_not_search_other_fields(self):
        team = Team(id="1", league="nfl", name="Chiefs", short_name="KC Chiefs", primary_color="#E31837")
        assert search("e31837", [team]) == []


class TestSearchIndex:
    def test_from_results_flattens(self):
        index = SearchIndex.from_results({league: list(teams) for league, teams in OFFLINE_TEAMS.items()})

        assert len(index) == len(CORPUS)
        assert [t.abbreviation for t in index.search("cowboys")] == ["DAL"]
        assert index.search(" ") == []
