"""
Errors raised by the game and its identity client
"""


class InvadersError(Exception):
    """Base class for every error raised by this package."""


class NoIdentifier(InvadersError):
    """No handle could be obtained while authenticating."""


class QuotaExhausted(InvadersError):
    """The daily play quota for the handle is used up."""

    def __init__(self, handle: str, limit: int):
        super().__init__(f"Daily limit of {limit} games reached for {handle}")
        self.handle = handle
        self.limit = limit


class StatsFetchFailure(InvadersError):
    """Ammunition or multiplier inputs could not be fetched."""


class RecordSessionFailure(InvadersError):
    """A played session could not be written to the quota counter."""


class AlreadyRunning(InvadersError):
    """The host already owns a running game instance."""
