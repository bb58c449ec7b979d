from typing import Any, Dict, Iterable, Optional

from loguru import logger
from pydantic import ValidationError

from teamfeed.errors import StorageError, UserNotFoundError
from teamfeed.models.preference import PreferenceRecord


class InMemoryPreferenceStore:
    """Process-local store holding preference blobs as plain JSON dicts.

    Accounts must be registered before preferences can be read or written,
    mirroring a users table where the row exists independently of its
    preference column.
    """

    def __init__(self, user_ids: Iterable[str] = ()):
        self._blobs: Dict[str, Optional[Dict[str, Any]]] = {
            user_id: None for user_id in user_ids
        }

    def add_user(self, user_id: str) -> None:
        self._blobs.setdefault(user_id, None)

    def raw_blob(self, user_id: str) -> Optional[Dict[str, Any]]:
        if user_id not in self._blobs:
            raise UserNotFoundError(user_id)
        return self._blobs[user_id]

    async def get(self, user_id: str) -> Optional[PreferenceRecord]:
        blob = self.raw_blob(user_id)
        if blob is None:
            return None
        try:
            return PreferenceRecord.model_validate(blob)
        except ValidationError as e:
            logger.error(f"Stored preference for {user_id} failed validation: {e}")
            raise StorageError(f"stored preference for {user_id} is corrupt") from e

    async def put(self, user_id: str, record: Optional[PreferenceRecord]) -> None:
        if user_id not in self._blobs:
            raise UserNotFoundError(user_id)
        self._blobs[user_id] = record.to_blob() if record is not None else None
