from typing import Any

from loguru import logger

from teamfeed.api.schemas import PreferenceSaved, PreferenceView
from teamfeed.auth.identity import Credentials, IdentityResolver
from teamfeed.errors import PreferenceValidationError
from teamfeed.preferences.reconciler import PreferenceReconciler


class PreferencesService:
    """Inbound preference surface: every call first resolves the caller.

    ``UnauthenticatedError`` from the identity resolver propagates as a
    caller error; ``UserNotFoundError`` and ``StorageError`` propagate from
    the reconciler unchanged.
    """

    def __init__(self, identity: IdentityResolver, reconciler: PreferenceReconciler):
        self.identity = identity
        self.reconciler = reconciler

    async def read(self, credentials: Credentials) -> PreferenceView:
        user_id = await self.identity.resolve(credentials)
        record = await self.reconciler.get(user_id)
        return PreferenceView(has_preference=record is not None, preference=record)

    async def save(self, credentials: Credentials, body: Any) -> PreferenceSaved:
        """Full save of ``{sports, teams}``."""
        user_id = await self.identity.resolve(credentials)
        if not isinstance(body, dict):
            raise PreferenceValidationError("Invalid data format")
        record = await self.reconciler.replace(
            user_id, body.get("sports"), body.get("teams")
        )
        return PreferenceSaved(message="Preferences saved successfully", preference=record)

    async def finish(self, credentials: Credentials, body: Any) -> PreferenceSaved:
        """Onboarding save: requires a sport and drops stale team picks."""
        user_id = await self.identity.resolve(credentials)
        if not isinstance(body, dict):
            raise PreferenceValidationError("Invalid data format")
        record = await self.reconciler.finish(
            user_id, body.get("sports"), body.get("teams") or {}
        )
        return PreferenceSaved(message="Preferences saved successfully", preference=record)

    async def update(self, credentials: Credentials, body: Any) -> PreferenceSaved:
        user_id = await self.identity.resolve(credentials)
        record = await self.reconciler.merge_fields(user_id, body)
        return PreferenceSaved(
            message="Preferences updated successfully", preference=record
        )

    async def clear(self, credentials: Credentials) -> PreferenceSaved:
        user_id = await self.identity.resolve(credentials)
        await self.reconciler.clear(user_id)
        logger.debug(f"Cleared preferences through API for {user_id}")
        return PreferenceSaved(message="Preferences cleared successfully")
