class TeamFeedError(Exception):
    """Base class for all teamfeed errors."""

    pass


class NotFoundError(TeamFeedError):
    """A referenced league or user does not exist."""

    pass


class LeagueNotFoundError(NotFoundError):
    """Raised when a league id is absent from the league registry."""

    def __init__(self, league_id: str):
        self.league_id = league_id
        super().__init__("league not found")


class UserNotFoundError(NotFoundError):
    """Raised when no account record backs a user id."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"user not found: {user_id}")


class TransportFailure(TeamFeedError):
    """Network, timeout or non-success status from an external feed."""

    pass


class AuthenticationError(TransportFailure):
    """Exception raised for authentication failures (401, 403)."""

    pass


class RateLimitError(TransportFailure):
    """Exception raised for rate limit errors (429)."""

    pass


class PreferenceValidationError(TeamFeedError):
    """Caller-supplied preference payload has the wrong shape."""

    def __init__(self, message: str, errors: list | None = None):
        self.errors = errors or []
        super().__init__(message)


class RequestValidationError(TeamFeedError):
    """Caller-supplied query arguments have the wrong shape."""

    pass


class StorageError(TeamFeedError):
    """The persistence collaborator failed; the operation may be retried."""

    pass


class UnauthenticatedError(TeamFeedError):
    """The caller's credentials do not resolve to a user identity."""

    pass
