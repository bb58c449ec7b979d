"""Editing helpers for a user's in-progress sport and team selection."""

from typing import Dict, Iterable, List, Mapping

from pydantic import BaseModel, ConfigDict, Field

from teamfeed.models.team import Team
from teamfeed.registry.leagues import get_category, leagues_for_sports


class TeamSelection(BaseModel):
    """Immutable snapshot of selected sports and per-league teams.

    Every edit returns a new selection.
    """

    model_config = ConfigDict(frozen=True)

    sports: List[str] = Field(default_factory=list)
    teams: Dict[str, List[Team]] = Field(default_factory=dict)

    @classmethod
    def from_mapping(
        cls, sports: Iterable[str], teams: Mapping[str, Iterable[Team]]
    ) -> "TeamSelection":
        return cls(
            sports=list(dict.fromkeys(sports)),
            teams={league: list(selected) for league, selected in teams.items()},
        )

    def is_selected(self, team: Team) -> bool:
        return team in self.teams.get(team.league, [])

    def toggle_team(self, team: Team) -> "TeamSelection":
        """Adds the team to its league's selection, or removes it if present."""
        current = self.teams.get(team.league, [])
        if team in current:
            updated = [selected for selected in current if selected != team]
        else:
            updated = [*current, team]
        return self.model_copy(update={"teams": {**self.teams, team.league: updated}})

    def toggle_sport(self, sport_id: str) -> "TeamSelection":
        """Selects a sport, or deselects it and drops its leagues' team picks."""
        if sport_id not in self.sports:
            return self.model_copy(update={"sports": [*self.sports, sport_id]})

        category = get_category(sport_id)
        dropped = set(category.leagues) if category else {sport_id}
        return self.model_copy(
            update={
                "sports": [sport for sport in self.sports if sport != sport_id],
                "teams": {
                    league: selected
                    for league, selected in self.teams.items()
                    if league not in dropped
                },
            }
        )

    def selected_leagues(self) -> List[str]:
        return leagues_for_sports(self.sports)

    def prune(self) -> "TeamSelection":
        """Removes team selections for leagues no selected sport covers."""
        covered = set(self.selected_leagues())
        return self.model_copy(
            update={
                "teams": {
                    league: selected
                    for league, selected in self.teams.items()
                    if league in covered
                }
            }
        )
