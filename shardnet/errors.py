"""Exception types raised by the networking components."""

from __future__ import annotations


class P2PError(Exception):
    """Base class for every error raised by this package."""

    message = "p2p error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail
        super().__init__(f"{self.message}: {detail}" if detail else self.message)


class InvalidValueError(P2PError, ValueError):
    """A configuration or argument value is out of its allowed range."""

    message = "invalid value"


class MissingComponentError(P2PError, ValueError):
    """A required collaborator was not provided."""

    message = "missing required component"


class NilPeerShardResolverError(MissingComponentError):
    """No peer shard resolver was provided."""

    message = "nil peer shard resolver"


class NilPreferredPeersHolderError(MissingComponentError):
    """No preferred peers holder was provided."""

    message = "nil preferred peers holder"


class NilLoggerError(MissingComponentError):
    """No logger was provided."""

    message = "nil logger"


class InvalidTimeToLiveError(P2PError, ValueError):
    """The time-to-live parameter is below its minimum."""

    message = "invalid value for the time-to-live parameter"


class UnknownConnectionWatcherTypeError(P2PError, ValueError):
    """The requested connections watcher type is not known."""

    message = "unknown connection type"