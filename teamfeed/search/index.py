from typing import Iterable, List, Sequence

from teamfeed.models.team import Team


def _matches(team: Team, needle: str) -> bool:
    return (
        needle in team.name.lower()
        or needle in team.display_name.lower()
        or needle in team.location.lower()
        or needle in team.abbreviation.lower()
    )


def search(query: str, corpus: Iterable[Team]) -> List[Team]:
    """Case-insensitive substring search over name, display name, location
    and abbreviation.

    A blank query returns no teams rather than the whole corpus. Results
    keep corpus order.
    """
    if not query or not query.strip():
        return []
    needle = query.lower()
    return [team for team in corpus if _matches(team, needle)]


class SearchIndex:
    """Flattened, read-only view over aggregated teams."""

    def __init__(self, teams: Iterable[Team] = ()):
        self._teams: Sequence[Team] = tuple(teams)

    @classmethod
    def from_results(cls, results: dict) -> "SearchIndex":
        return cls(team for teams in results.values() for team in teams)

    def __len__(self) -> int:
        return len(self._teams)

    def search(self, query: str) -> List[Team]:
        return search(query, self._teams)
