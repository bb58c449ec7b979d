# teamfeed/models/preference.py
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from teamfeed.errors import PreferenceValidationError
from teamfeed.models.team import Team
from teamfeed.registry.leagues import is_categorized_league, is_known_sport


class PreferenceRecord(BaseModel):
    """The preference blob persisted against a user account.

    ``sports`` and the keys of ``teams`` may disagree between saves; see
    ``TeamSelection.prune`` for the cleanup applied on finish.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    sports: List[str] = Field(default_factory=list)
    teams: Dict[str, List[Team]] = Field(default_factory=dict)
    updated_at: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def fill_team_leagues(cls, data: Any) -> Any:
        """Stamps the mapping key onto team entries that omit their league."""
        if not isinstance(data, dict):
            return data
        teams = data.get("teams")
        if not isinstance(teams, dict):
            return data
        filled = {}
        for league, entries in teams.items():
            if isinstance(entries, list):
                entries = [
                    {**entry, "league": league}
                    if isinstance(entry, dict) and "league" not in entry
                    else entry
                    for entry in entries
                ]
            filled[league] = entries
        return {**data, "teams": filled}

    @field_validator("sports")
    @classmethod
    def check_sports(cls, sports: List[str]) -> List[str]:
        unknown = [sport for sport in sports if not is_known_sport(sport)]
        if unknown:
            raise ValueError(f"unknown sports: {', '.join(unknown)}")
        return list(dict.fromkeys(sports))

    @field_validator("teams")
    @classmethod
    def check_teams(cls, teams: Dict[str, List[Team]]) -> Dict[str, List[Team]]:
        for league, selected in teams.items():
            if not is_categorized_league(league):
                raise ValueError(f"league '{league}' is not part of any sport category")
            for team in selected:
                if team.league != league:
                    raise ValueError(
                        f"team {team.id} belongs to '{team.league}', not '{league}'"
                    )
        # Selections are sets keyed by (league, id); keep first occurrence
        return {league: list(dict.fromkeys(selected)) for league, selected in teams.items()}

    def to_blob(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


def parse_preference(data: Any) -> PreferenceRecord:
    """Validates a caller or storage payload into a PreferenceRecord."""
    if not isinstance(data, dict):
        raise PreferenceValidationError("preference payload must be an object")
    try:
        return PreferenceRecord.model_validate(data)
    except ValidationError as e:
        raise PreferenceValidationError(
            f"invalid preference payload: {e.error_count()} error(s)",
            errors=e.errors(include_url=False),
        ) from e

