"""Storage capability protocol for preference persistence."""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from teamfeed.models.preference import PreferenceRecord


@runtime_checkable
class PreferenceStore(Protocol):
    """Get/set of the preference blob keyed by user identity.

    Implementations raise ``UserNotFoundError`` when no account row backs the
    user id and ``StorageError`` for any persistence failure.
    """

    async def get(self, user_id: str) -> Optional[PreferenceRecord]:
        """Returns the stored preference, or None when the user has none."""
        ...

    async def put(self, user_id: str, record: Optional[PreferenceRecord]) -> None:
        """Replaces the stored preference; None clears it."""
        ...
