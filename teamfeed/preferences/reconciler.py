import asyncio
import weakref
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Mapping, Optional

from loguru import logger

from teamfeed.errors import PreferenceValidationError
from teamfeed.models.preference import PreferenceRecord, parse_preference
from teamfeed.preferences.selection import TeamSelection
from teamfeed.storage.protocols import PreferenceStore

Clock = Callable[[], datetime]

# Keys the reconciler owns; callers cannot set them through a merge
_TIMESTAMP_KEYS = ("updatedAt", "updated_at")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PreferenceReconciler:
    """Merges user selections into the stored preference record.

    Read-modify-write sequences for one user id run under that user's lock,
    so two concurrent merges for the same user cannot lose an update. Locks
    for different users are independent.
    """

    def __init__(self, store: PreferenceStore, clock: Clock = utc_now):
        self.store = store
        self._clock = clock
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, user_id: str) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock

    def _stamp(self, previous: Optional[PreferenceRecord]) -> datetime:
        now = self._clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        if previous is None or previous.updated_at is None:
            return now
        last = previous.updated_at
        if last.tzinfo is None:
            last = last.replace(tzinfo=timezone.utc)
        return max(now, last)

    async def get(self, user_id: str) -> Optional[PreferenceRecord]:
        """Returns the stored preference, or None when the user has none yet."""
        return await self.store.get(user_id)

    async def replace(
        self,
        user_id: str,
        selected_leagues: Iterable[str],
        selected_teams: Mapping[str, Iterable[Any]],
    ) -> PreferenceRecord:
        """Overwrites the stored selection with the given one."""
        payload = _selection_payload(selected_leagues, selected_teams)
        async with self._lock_for(user_id):
            previous = await self.store.get(user_id)
            record = parse_preference(
                {**payload, "updatedAt": self._stamp(previous)}
            )
            await self.store.put(user_id, record)
        logger.info(
            f"Preferences saved for user {user_id}: {len(record.sports)} sports, "
            f"{len(record.teams)} leagues with team picks"
        )
        return record

    async def merge_fields(
        self, user_id: str, partial: Mapping[str, Any]
    ) -> PreferenceRecord:
        """Shallow-merges ``partial`` over the stored record.

        Top-level keys in ``partial`` replace the stored value wholesale;
        keys it omits are kept. ``{"sports": [...]}`` therefore leaves
        ``teams`` untouched, and adding one league to ``teams`` requires
        sending the full ``teams`` mapping.
        """
        if not isinstance(partial, Mapping):
            raise PreferenceValidationError("preference update must be an object")
        incoming = {
            key: value for key, value in partial.items() if key not in _TIMESTAMP_KEYS
        }

        async with self._lock_for(user_id):
            previous = await self.store.get(user_id)
            current = previous.to_blob() if previous is not None else {}
            current.update(incoming)
            current["updatedAt"] = self._stamp(previous)
            record = parse_preference(current)
            await self.store.put(user_id, record)

        logger.info(f"Preferences updated for user {user_id}: {sorted(incoming)}")
        return record

    async def clear(self, user_id: str) -> None:
        """Empties the preference payload; the account record stays."""
        async with self._lock_for(user_id):
            await self.store.put(user_id, None)
        logger.info(f"Preferences cleared for user {user_id}")

    async def finish(
        self,
        user_id: str,
        selected_sports: Iterable[str],
        selected_teams: Mapping[str, Iterable[Any]],
    ) -> PreferenceRecord:
        """Completes onboarding: prunes stale team picks, then replaces.

        Raises:
            PreferenceValidationError: If no sport is selected.
        """
        sports = list(dict.fromkeys(_require_strings(selected_sports)))
        if not sports:
            raise PreferenceValidationError("select at least one sport")
        record = parse_preference(_selection_payload(sports, selected_teams))
        pruned = TeamSelection(sports=record.sports, teams=record.teams).prune()
        return await self.replace(user_id, pruned.sports, pruned.teams)


def _require_strings(values: Any) -> list:
    if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
        raise PreferenceValidationError("sports must be a list of ids")
    values = list(values)
    if not all(isinstance(value, str) for value in values):
        raise PreferenceValidationError("sports must be a list of ids")
    return values


def _selection_payload(sports: Any, teams: Any) -> dict:
    if not isinstance(teams, Mapping):
        raise PreferenceValidationError("teams must be a mapping of league to teams")
    return {
        "sports": _require_strings(sports),
        "teams": {
            league: list(selected)
            if isinstance(selected, Iterable) and not isinstance(selected, (str, dict))
            else selected
            for league, selected in teams.items()
        },
    }
