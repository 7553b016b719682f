"""Connection counters and watchers that report newly known peer connections."""

from __future__ import annotations

import enum
import threading
import time
from typing import Any, Callable, Dict, FrozenSet, Hashable, Optional, Set, Union

from .errors import (
    InvalidTimeToLiveError,
    InvalidValueError,
    NilLoggerError,
    UnknownConnectionWatcherTypeError,
)
from .peers import PeerID, pretty_peer_id

MIN_TIME_TO_LIVE = 1.0

PrintHandler = Callable[[PeerID, str, Any], None]


class ConnectionsMetric:
    """Counts connections and disconnections reported by the network."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._num_connections = 0
        self._num_disconnections = 0
        self._listen_addresses: Set[Any] = set()

    @property
    def listen_addresses(self) -> FrozenSet[Any]:
        """Addresses the network currently listens on."""
        with self._lock:
            return frozenset(self._listen_addresses)

    def listen(self, network: Any, address: Any) -> None:
        """Remember an address the network started listening on; it is not counted."""
        with self._lock:
            self._listen_addresses.add(address)

    def listen_close(self, network: Any, address: Any) -> None:
        """Forget an address the network stopped listening on; it is not counted."""
        with self._lock:
            self._listen_addresses.discard(address)

    def connected(self, network: Any, conn: Any) -> None:
        """Count one opened connection."""
        with self._lock:
            self._num_connections += 1

    def disconnected(self, network: Any, conn: Any) -> None:
        """Count one closed connection."""
        with self._lock:
            self._num_disconnections += 1

    def reset_num_connections(self) -> int:
        """Reset the connection counter and return its previous value."""
        with self._lock:
            value, self._num_connections = self._num_connections, 0
        return value

    def reset_num_disconnections(self) -> int:
        """Reset the disconnection counter and return its previous value."""
        with self._lock:
            value, self._num_disconnections = self._num_disconnections, 0
        return value


class DisabledConnectionsWatcher:
    """A connections watcher that reports nothing."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.ignored = 0
        self.closed = False

    def new_known_connection(self, pid: PeerID, connection: str) -> None:
        """Count the connection without reporting it."""
        with self._lock:
            self.ignored += 1

    def close(self) -> None:
        """Mark the watcher as closed; there is nothing to release."""
        with self._lock:
            self.closed = True

    def __enter__(self) -> "DisabledConnectionsWatcher":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class TimeCache:
    """Keys that expire after a time span, removed when swept."""

    def __init__(self, default_ttl: float, clock: Callable[[], float] = time.monotonic) -> None:
        self._default_ttl = default_ttl
        self._clock = clock
        self._expiries: Dict[Hashable, float] = {}
        self._lock = threading.Lock()

    def has(self, key: Hashable) -> bool:
        """Return True if ``key`` is held (it may be expired but not yet swept)."""
        with self._lock:
            return key in self._expiries

    def upsert(self, key: Hashable, ttl: Optional[float]) -> None:
        """Add ``key`` or refresh its expiry; a missing or non-positive ttl uses the default."""
        if not key:
            raise InvalidValueError("empty key")
        span = ttl if ttl is not None and ttl > 0 else self._default_ttl
        with self._lock:
            self._expiries[key] = self._clock() + span

    def sweep(self) -> None:
        """Remove every expired key."""
        now = self._clock()
        with self._lock:
            expired = [key for key, expiry in self._expiries.items() if expiry <= now]
            for key in expired:
                del self._expiries[key]

    def __len__(self) -> int:
        with self._lock:
            return len(self._expiries)


def log_print_handler(pid: PeerID, connection: str, log: Any) -> None:
    """Log a newly known peer connection at debug level."""
    log.debug("new known peer pid=%s connection=%s", pretty_peer_id(pid), connection)


class PrintConnectionsWatcher:
    """Reports each peer connection once per time-to-live window."""

    def __init__(
        self,
        time_to_live: float,
        logger: Any,
        print_handler: Optional[PrintHandler] = None,
    ) -> None:
        if time_to_live < MIN_TIME_TO_LIVE:
            raise InvalidTimeToLiveError(
                f"got: {time_to_live}, minimum: {MIN_TIME_TO_LIVE}"
            )
        if logger is None:
            raise NilLoggerError()

        self.time_to_live = time_to_live
        self._log = logger
        self._print_handler = print_handler or log_print_handler
        self._cache = TimeCache(time_to_live)
        self._stop = threading.Event()
        self._thread = threading.Thread(
            target=self._sweep_loop, name="connections-watcher-sweep", daemon=True
        )
        self._thread.start()

    def _sweep_loop(self) -> None:
        while not self._stop.wait(self.time_to_live):
            self._cache.sweep()
        self._log.debug("print connections watcher's processing loop is closing...")

    def new_known_connection(self, pid: PeerID, connection: str) -> None:
        """Record the connection and report it if the peer was not recently seen."""
        conn = connection.strip(" ")
        if not conn:
            return

        key = pretty_peer_id(pid)
        seen = self._cache.has(key)
        try:
            self._cache.upsert(key, self.time_to_live)
        except InvalidValueError as err:
            self._log.warning(
                "programming error in PrintConnectionsWatcher.new_known_connection: %s", err
            )
            return
        if seen:
            return

        self._print_handler(pid, conn, self._log)

    def close(self) -> None:
        """Stop the background sweeper."""
        self._stop.set()
        if self._thread is not threading.current_thread():
            self._thread.join()

    def sweeper_stopped(self) -> bool:
        """Return True once the background sweeper has finished."""
        return not self._thread.is_alive()

    def __enter__(self) -> "PrintConnectionsWatcher":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class ConnectionWatcherType(str, enum.Enum):
    """Kinds of connections watcher."""

    PRINT = "print"
    DISABLED = "disabled"
    EMPTY = ""


def new_connections_watcher(
    watcher_type: Union[str, ConnectionWatcherType],
    time_to_live: float,
    logger: Any,
) -> Union[PrintConnectionsWatcher, DisabledConnectionsWatcher]:
    """Create the connections watcher named by ``watcher_type``."""
    try:
        kind = ConnectionWatcherType(watcher_type)
    except ValueError:
        raise UnknownConnectionWatcherTypeError(str(watcher_type)) from None

    if kind is ConnectionWatcherType.PRINT:
        return PrintConnectionsWatcher(time_to_live, logger)
    return DisabledConnectionsWatcher()