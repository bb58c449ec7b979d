"""Command-line access to aggregated league rosters and stored preferences."""

import sys
import asyncio
import argparse
from typing import Dict, Iterable, List, Optional

from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from teamfeed.logging.setup import setup_logging
from teamfeed.aggregation.aggregator import TeamAggregator
from teamfeed.api.preferences import PreferencesService
from teamfeed.api.teams import TeamsService
from teamfeed.auth.identity import (
    Credentials,
    StaticTokenIdentityResolver,
    SupabaseIdentityResolver,
)
from teamfeed.config.settings import settings
from teamfeed.errors import (
    NotFoundError,
    PreferenceValidationError,
    RequestValidationError,
    StorageError,
    UnauthenticatedError,
)
from teamfeed.models.preference import PreferenceRecord
from teamfeed.models.team import Team
from teamfeed.preferences.reconciler import PreferenceReconciler
from teamfeed.registry.leagues import available_sports, league_name
from teamfeed.storage.memory_store import InMemoryPreferenceStore
from teamfeed.storage.supabase_client import SupabasePreferenceStore, initialize_supabase

console = Console()


def render_teams(title: str, teams: List[Team]) -> Table:
    table = Table(title=title)
    table.add_column("ID", justify="right")
    table.add_column("Team")
    table.add_column("Abbr")
    table.add_column("League")
    table.add_column("Colors")
    for team in teams:
        table.add_row(
            team.id,
            team.display_name or team.name,
            team.abbreviation,
            league_name(team.league),
            f"[{team.primary_color}]■[/] [{team.secondary_color}]■[/]",
        )
    return table


async def run_teams(service: TeamsService, leagues: List[str]) -> int:
    response = await service.get_teams(leagues)
    for league, teams in response.results.items():
        console.print(render_teams(f"{league_name(league)} ({len(teams)})", teams))
    for league, message in response.errors.items():
        console.print(
            Panel(message, title=f"{league_name(league)} unavailable", style="yellow")
        )
    return 0 if response.successful_sports else 1


async def run_search(service: TeamsService, query: str) -> int:
    matches = await service.search_teams(query)
    if not matches:
        console.print(f"No teams match '{query}'.")
        return 1
    console.print(render_teams(f"Matches for '{query}'", matches))
    return 0


def run_sports() -> int:
    table = Table(title="Available sports")
    table.add_column("Sport")
    table.add_column("Leagues")
    for category in available_sports():
        table.add_row(
            category.name, ", ".join(league_name(league) for league in category.leagues)
        )
    console.print(table)
    return 0


async def build_preferences_service(token: str) -> PreferencesService:
    """Wires the preference surface to Supabase, or to memory when unconfigured."""
    client = await initialize_supabase()
    if client:
        return PreferencesService(
            SupabaseIdentityResolver(client),
            PreferenceReconciler(SupabasePreferenceStore(client)),
        )

    logger.warning(
        "Supabase is not configured; preferences are kept in memory for this run only."
    )
    user_id = settings.local_user_id
    return PreferencesService(
        StaticTokenIdentityResolver({token: user_id}),
        PreferenceReconciler(InMemoryPreferenceStore([user_id])),
    )


async def resolve_team_refs(
    service: TeamsService, refs: Iterable[str]
) -> Dict[str, List[Team]]:
    """Turns ``league:id`` references into teams from the current rosters."""
    wanted: Dict[str, List[str]] = {}
    for ref in refs:
        league, sep, team_id = ref.partition(":")
        if not sep or not league or not team_id:
            raise RequestValidationError(f"team must look like league:id, got '{ref}'")
        wanted.setdefault(league, []).append(team_id)

    response = await service.get_teams(list(wanted))
    selected: Dict[str, List[Team]] = {}
    for league, team_ids in wanted.items():
        roster = {team.id: team for team in response.results.get(league, [])}
        missing = [team_id for team_id in team_ids if team_id not in roster]
        if missing:
            raise RequestValidationError(
                f"unknown {league} team(s): {', '.join(missing)}"
            )
        selected[league] = [roster[team_id] for team_id in team_ids]
    return selected


def render_preference(record: PreferenceRecord, title: str) -> None:
    picks = [team for teams in record.teams.values() for team in teams]
    console.print(
        Panel(
            f"Sports: {', '.join(record.sports) or '-'}\nUpdated: {record.updated_at}",
            title=title,
        )
    )
    console.print(render_teams("Followed teams", picks))


async def run_prefs(
    service: PreferencesService,
    credentials: Credentials,
    action: str,
    sports: Iterable[str] = (),
    team_refs: Iterable[str] = (),
    teams_service: Optional[TeamsService] = None,
) -> int:
    try:
        if action == "show":
            view = await service.read(credentials)
            if not view.has_preference:
                console.print("No saved preferences.")
                return 0
            render_preference(view.preference, "Saved preferences")
        elif action == "clear":
            saved = await service.clear(credentials)
            console.print(saved.message)
        elif action == "save":
            team_refs = list(team_refs)
            teams = (
                await resolve_team_refs(teams_service, team_refs)
                if team_refs and teams_service
                else {}
            )
            saved = await service.finish(
                credentials, {"sports": list(sports), "teams": teams}
            )
            render_preference(saved.preference, saved.message)
        elif action == "update":
            saved = await service.update(credentials, {"sports": list(sports)})
            render_preference(saved.preference, saved.message)
        else:
            raise RequestValidationError(f"unknown action '{action}'")
    except UnauthenticatedError:
        logger.error("Credentials were rejected.")
        return 4
    except NotFoundError as e:
        logger.error(str(e))
        return 1
    except (PreferenceValidationError, RequestValidationError) as e:
        logger.error(f"Invalid preferences: {e}")
        return 1
    except StorageError as e:
        logger.error(f"Storage unavailable: {e}")
        return 3
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="teamfeed", description=__doc__)
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL.")
    sub = parser.add_subparsers(dest="command", required=True)
    teams = sub.add_parser("teams", help="Fetch teams for one or more leagues.")
    teams.add_argument("leagues", nargs="+")
    search = sub.add_parser("search", help="Search teams across every league.")
    search.add_argument("query")
    sub.add_parser("sports", help="List sport categories and their leagues.")
    prefs = sub.add_parser("prefs", help="Show, save, update or clear preferences.")
    prefs.add_argument("action", choices=["show", "save", "update", "clear"])
    prefs.add_argument("--token", default="local", help="Session token of the caller.")
    prefs.add_argument("--sports", nargs="*", default=[], help="Sport or league ids.")
    prefs.add_argument(
        "--team", action="append", default=[], help="Team to follow, as league:id."
    )
    return parser


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    if args.command == "sports":
        return run_sports()
    async with TeamAggregator() as aggregator:
        service = TeamsService(aggregator)
        if args.command == "prefs":
            preferences = await build_preferences_service(args.token)
            return await run_prefs(
                preferences,
                {"Authorization": f"Bearer {args.token}"},
                args.action,
                sports=args.sports,
                team_refs=args.team,
                teams_service=service,
            )
        if args.command == "teams":
            return await run_teams(service, args.leagues)
        return await run_search(service, args.query)


def run() -> None:
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Execution interrupted by user (KeyboardInterrupt).")
        sys.exit(0)
    except Exception as e:
        logger.exception(f"Unhandled exception in main execution: {e}")
        sys.exit(1)


if __name__ == "__main__":
    run()
