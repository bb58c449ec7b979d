from typing import Any, Dict, List, Optional

from loguru import logger

from teamfeed.models.team import DEFAULT_PRIMARY_COLOR, DEFAULT_SECONDARY_COLOR, Team


class Normalizer:
    """Converts raw league feed payloads into ``Team`` objects.

    The provider schema is loose and fields go missing, so every lookup is
    tolerant: a payload of the wrong shape normalizes to an empty list and a
    team entry that cannot be identified is skipped. Nothing here raises for
    shape mismatches.
    """

    def normalize(self, league: str, raw_payload: Any) -> List[Team]:
        """Normalizes one league's raw payload into an ordered list of teams."""
        raw_teams = self._extract_team_entries(raw_payload)
        if raw_teams is None:
            logger.warning(
                f"Payload for {league} has no team list; normalizing to an empty roster."
            )
            return []

        teams: List[Team] = []
        for raw_entry in raw_teams:
            team = self._normalize_team(league, raw_entry)
            if team is not None:
                teams.append(team)

        skipped = len(raw_teams) - len(teams)
        if skipped:
            logger.warning(f"Skipped {skipped} unusable team entries for {league}.")
        logger.debug(f"Normalized {len(teams)} teams for {league}.")
        return teams

    def _extract_team_entries(self, raw_payload: Any) -> Optional[List[Any]]:
        # Expected path: sports[0].leagues[0].teams[]
        if not isinstance(raw_payload, dict):
            return None
        sports = raw_payload.get("sports")
        if not isinstance(sports, list) or not sports or not isinstance(sports[0], dict):
            return None
        leagues = sports[0].get("leagues")
        if not isinstance(leagues, list) or not leagues or not isinstance(leagues[0], dict):
            return None
        teams = leagues[0].get("teams")
        if not isinstance(teams, list):
            return None
        return teams

    def _normalize_team(self, league: str, raw_entry: Any) -> Optional[Team]:
        if not isinstance(raw_entry, dict):
            return None
        raw_team = raw_entry.get("team", raw_entry)
        if not isinstance(raw_team, dict):
            return None

        team_id = raw_team.get("id")
        if team_id is None or team_id == "":
            return None

        name = _text(raw_team.get("name"))
        return Team(
            id=str(team_id),
            league=league,
            name=name,
            display_name=_text(raw_team.get("displayName")),
            short_name=_text(raw_team.get("shortDisplayName")) or name,
            abbreviation=_text(raw_team.get("abbreviation")),
            location=_text(raw_team.get("location")),
            logo_url=select_logo(raw_team.get("logos")),
            primary_color=_color(raw_team.get("color"), DEFAULT_PRIMARY_COLOR),
            secondary_color=_color(
                raw_team.get("alternateColor"), DEFAULT_SECONDARY_COLOR
            ),
        )


def select_logo(logos: Any) -> str:
    """Returns the href of the widest logo variant, or "" when there is none.

    Ties keep the variant listed first.
    """
    if not isinstance(logos, list):
        return ""
    best: Optional[Dict[str, Any]] = None
    best_width = float("-inf")
    for logo in logos:
        if not isinstance(logo, dict):
            continue
        width = _number(logo.get("width"))
        if best is None or width > best_width:
            best, best_width = logo, width
    if best is None:
        return ""
    return _text(best.get("href"))


def _color(value: Any, default: str) -> str:
    color = _text(value).strip()
    if not color:
        return default
    return color if color.startswith("#") else f"#{color}"


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _number(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0
