from typing import Mapping, Optional, Protocol, runtime_checkable

from loguru import logger
from supabase import AsyncClient

from teamfeed.errors import UnauthenticatedError

Credentials = Mapping[str, str]


@runtime_checkable
class IdentityResolver(Protocol):
    """Turns inbound request credentials into a stable user id."""

    async def resolve(self, credentials: Credentials) -> str:
        """Raises UnauthenticatedError when no identity can be established."""
        ...


def bearer_token(credentials: Credentials) -> Optional[str]:
    """Extracts the token from an ``Authorization: Bearer <token>`` header."""
    header = None
    for name, value in credentials.items():
        if name.lower() == "authorization":
            header = value
            break
    if not header:
        return None
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


class StaticTokenIdentityResolver:
    """Resolves bearer tokens from a fixed token -> user id table."""

    def __init__(self, tokens: Mapping[str, str]):
        self._tokens = dict(tokens)

    async def resolve(self, credentials: Credentials) -> str:
        token = bearer_token(credentials)
        if token is None or token not in self._tokens:
            raise UnauthenticatedError("Unauthorized")
        return self._tokens[token]


class SupabaseIdentityResolver:
    """Validates the bearer JWT with Supabase Auth and returns the user id."""

    def __init__(self, client: AsyncClient):
        self.client = client

    async def resolve(self, credentials: Credentials) -> str:
        token = bearer_token(credentials)
        if token is None:
            raise UnauthenticatedError("Unauthorized")
        try:
            response = await self.client.auth.get_user(token)
        except Exception as e:
            logger.warning(f"Supabase rejected session token: {e}")
            raise UnauthenticatedError("Unauthorized") from e
        user = getattr(response, "user", None)
        if user is None or not getattr(user, "id", None):
            raise UnauthenticatedError("Unauthorized")
        return str(user.id)
