from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import FetchOutcome
from .team import Team


class LeagueFetchResult(BaseModel):
    """Outcome of fetching a single league within one aggregation call."""

    model_config = ConfigDict(frozen=True)

    league: str
    teams: List[Team] = []
    outcome: FetchOutcome = FetchOutcome.OK
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.outcome != FetchOutcome.OK


class AggregationResult(BaseModel):
    """Per-league teams plus per-league error messages for one call.

    A league that failed transport appears in both maps; an unknown league
    appears only in ``errors``.
    """

    results: Dict[str, List[Team]] = Field(default_factory=dict)
    errors: Dict[str, str] = Field(default_factory=dict)
    outcomes: Dict[str, FetchOutcome] = Field(default_factory=dict)
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def all_teams(self) -> List[Team]:
        """Flattens results in league order, then roster order."""
        return [team for teams in self.results.values() for team in teams]
