# teamfeed/storage/supabase_client.py
from typing import Any, Dict, Optional

from loguru import logger
from postgrest import APIResponse
from postgrest.exceptions import APIError
from pydantic import ValidationError
from supabase import AsyncClient, create_async_client

from teamfeed.config.settings import settings
from teamfeed.errors import StorageError, UserNotFoundError
from teamfeed.models.preference import PreferenceRecord

# Module-level storage for the async client instance
_async_supabase_client: Optional[AsyncClient] = None


async def initialize_supabase() -> Optional[AsyncClient]:
    """Initializes the global ASYNC Supabase client and returns it."""
    global _async_supabase_client
    if _async_supabase_client:
        logger.debug("Async Supabase client already initialized.")
        return _async_supabase_client

    if not settings.supabase_configured:
        logger.warning("Supabase URL or key not configured in settings.")
        return None

    key = settings.supabase_service_key or settings.supabase_key
    logger.debug(
        f"Attempting to initialize Async Supabase client with URL: {settings.supabase_url}"
    )
    try:
        client: AsyncClient = await create_async_client(settings.supabase_url, key)
        _async_supabase_client = client
        logger.success("Async Supabase client initialized successfully.")
        return client
    except Exception as e:
        logger.exception(f"Failed to initialize Async Supabase client: {e}")
        return None


class SupabasePreferenceStore:
    """Preference blobs stored in a JSON column of the users table.

    The user row is owned elsewhere (sign-up); this store only reads and
    updates its preference column, so a missing row is ``UserNotFoundError``.
    """

    def __init__(
        self,
        client: AsyncClient,
        table: Optional[str] = None,
        column: Optional[str] = None,
    ):
        self.client = client
        self.table = table or settings.users_table
        self.column = column or settings.preferences_column

    async def get(self, user_id: str) -> Optional[PreferenceRecord]:
        try:
            response: APIResponse = (
                await self.client.table(self.table)
                .select(f"id, {self.column}")
                .eq("id", user_id)
                .limit(1)
                .execute()
            )
        except APIError as e:
            logger.error(f"Supabase API error reading preferences: {e.message}")
            raise StorageError(f"failed to read preferences: {e.message}") from e
        except Exception as e:
            logger.exception(f"Unexpected error reading preferences for {user_id}")
            raise StorageError("failed to read preferences") from e

        if not response.data:
            raise UserNotFoundError(user_id)

        blob: Optional[Dict[str, Any]] = response.data[0].get(self.column)
        if not blob:
            return None
        try:
            return PreferenceRecord.model_validate(blob)
        except ValidationError as e:
            logger.error(f"Stored preference for {user_id} failed validation: {e}")
            raise StorageError(f"stored preference for {user_id} is corrupt") from e

    async def put(self, user_id: str, record: Optional[PreferenceRecord]) -> None:
        blob = record.to_blob() if record is not None else None
        try:
            response: APIResponse = (
                await self.client.table(self.table)
                .update({self.column: blob})
                .eq("id", user_id)
                .execute()
            )
        except APIError as e:
            logger.error(f"Supabase API error writing preferences: {e.message}")
            logger.debug(f"Full APIError details: {e}")
            raise StorageError(f"failed to write preferences: {e.message}") from e
        except Exception as e:
            logger.exception(f"Unexpected error writing preferences for {user_id}")
            raise StorageError("failed to write preferences") from e

        # PostgREST returns the updated rows; none means no such user
        if not response.data:
            raise UserNotFoundError(user_id)
        logger.success(f"Stored preferences for user {user_id} in {self.table}.")
