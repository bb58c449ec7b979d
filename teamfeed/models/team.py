# teamfeed/models/team.py
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_PRIMARY_COLOR = "#000000"
DEFAULT_SECONDARY_COLOR = "#FFFFFF"


class Team(BaseModel):
    """A normalized team as served to callers and stored in preferences.

    ``id`` is only unique within its league; identity is ``(league, id)``.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: str
    league: str
    name: str = ""
    display_name: str = ""
    short_name: str = ""
    abbreviation: str = ""
    location: str = ""
    logo_url: str = ""  # Empty when the feed offers no logo
    primary_color: str = Field(default=DEFAULT_PRIMARY_COLOR)
    secondary_color: str = Field(default=DEFAULT_SECONDARY_COLOR)

    @property
    def key(self) -> tuple[str, str]:
        return (self.league, self.id)

    def __hash__(self):
        return hash(self.key)

    def __eq__(self, other):
        if not isinstance(other, Team):
            return NotImplemented
        return self.key == other.key
