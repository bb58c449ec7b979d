from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from teamfeed.models.preference import PreferenceRecord
from teamfeed.models.team import Team


class ResponseModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class TeamsResponse(ResponseModel):
    """Batch "get teams" response."""

    results: Dict[str, List[Team]] = Field(default_factory=dict)
    errors: Dict[str, str] = Field(default_factory=dict)
    total_sports: int = 0
    successful_sports: int = 0
    last_updated: datetime


class TeamListResponse(ResponseModel):
    """Single-league "get teams" response."""

    sport: str
    team_count: int
    teams: List[Team]
    last_updated: datetime
    error: Optional[str] = None


class PreferenceView(ResponseModel):
    has_preference: bool
    preference: Optional[PreferenceRecord] = None


class PreferenceSaved(ResponseModel):
    success: bool = True
    message: str
    preference: Optional[PreferenceRecord] = None
