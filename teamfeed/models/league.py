from typing import Tuple

from pydantic import BaseModel, ConfigDict


class FeedLocator(BaseModel):
    """Where to fetch one league's roster from."""

    model_config = ConfigDict(frozen=True)

    league: str
    url: str
    display_name: str


class SportCategory(BaseModel):
    """UI-level grouping of related leagues."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    leagues: Tuple[str, ...]
