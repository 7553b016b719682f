"""Connection sharders: decide which connected peers should be evicted."""

from __future__ import annotations

import enum
import hashlib
import threading
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from .errors import (
    InvalidValueError,
    NilLoggerError,
    NilPeerShardResolverError,
    NilPreferredPeersHolderError,
)
from .peers import P2PConfig, PeerID, PeerShardResolver, PeerType, pretty_peer_id
from .sorting import PeerDistance, sort_peer_distances

MIN_ALLOWED_CONNECTED_PEERS_LISTS_SHARDER = 5
MIN_ALLOWED_VALIDATORS = 1
MIN_ALLOWED_OBSERVERS = 1
MIN_UNKNOWN_PEERS = 1
MIN_ALLOWED_CONNECTED_PEERS_ONE_SHARDER = 3


def _as_bytes(pid: PeerID) -> bytes:
    return pid if isinstance(pid, bytes) else pid.encode("utf-8")


def _kad_key(pid: PeerID) -> bytes:
    return hashlib.sha256(_as_bytes(pid)).digest()


def compute_distance_by_counting_bits(src: PeerID, dest: PeerID) -> int:
    """Kademlia distance: number of differing bits between the hashed peer IDs."""
    return sum(
        bin(a ^ b).count("1") for a, b in zip(_kad_key(src), _kad_key(dest))
    )


def compute_distance_log2_based(src: PeerID, dest: PeerID) -> int:
    """Kademlia distance: bit length of the xor of the hashed peer IDs."""
    src_key = _kad_key(src)
    leading_zeros = 0
    for a, b in zip(src_key, _kad_key(dest)):
        result = a ^ b
        leading_zeros += 8 - result.bit_length()
        if result:
            break
    return len(src_key) * 8 - leading_zeros


def _has(pid: PeerID, pids: Iterable[PeerID]) -> bool:
    return pid in pids


def _evict(distances: List[PeerDistance], num_keep: int) -> List[PeerID]:
    num_keep = max(num_keep, 0)
    if num_keep >= len(distances):
        return []
    return [pd.pid for pd in sort_peer_distances(distances)[num_keep:]]


def _used_and_spare(existing: int, maximum: int) -> tuple[int, int]:
    if existing < maximum:
        return existing, maximum - existing
    return maximum, 0


class _Category(enum.Enum):
    INTRA_SHARD_VALIDATORS = enum.auto()
    CROSS_SHARD_VALIDATORS = enum.auto()
    INTRA_SHARD_OBSERVERS = enum.auto()
    CROSS_SHARD_OBSERVERS = enum.auto()
    SEEDERS = enum.auto()
    UNKNOWN = enum.auto()


class ListsSharder:
    """Splits peers into intra-shard, cross-shard, seeder and unknown lists,
    each bounded, with spare room flowing to the unknown list."""

    def __init__(
        self,
        peer_resolver: PeerShardResolver,
        self_peer_id: PeerID,
        p2p_config: P2PConfig,
        preferred_peers_holder: Any,
        logger: Any,
    ) -> None:
        if peer_resolver is None:
            raise NilPeerShardResolverError()
        sharding = p2p_config.sharding
        checks = (
            (sharding.target_peer_count, MIN_ALLOWED_CONNECTED_PEERS_LISTS_SHARDER, "maxPeerCount"),
            (sharding.max_intra_shard_validators, MIN_ALLOWED_VALIDATORS, "maxIntraShardValidators"),
            (sharding.max_cross_shard_validators, MIN_ALLOWED_VALIDATORS, "maxCrossShardValidators"),
            (sharding.max_intra_shard_observers, MIN_ALLOWED_OBSERVERS, "maxIntraShardObservers"),
            (sharding.max_cross_shard_observers, MIN_ALLOWED_OBSERVERS, "maxCrossShardObservers"),
        )
        for value, minimum, name in checks:
            if value < minimum:
                raise InvalidValueError(f"{name} should be at least {minimum}")
        if preferred_peers_holder is None:
            raise NilPreferredPeersHolderError("while creating a new ListsSharder")
        if logger is None:
            raise NilLoggerError("while creating a new ListsSharder")

        self.max_peer_count = sharding.target_peer_count
        self.max_intra_shard_validators = sharding.max_intra_shard_validators
        self.max_cross_shard_validators = sharding.max_cross_shard_validators
        self.max_intra_shard_observers = sharding.max_intra_shard_observers
        self.max_cross_shard_observers = sharding.max_cross_shard_observers
        self.max_seeders = sharding.max_seeders

        if self.max_intra_shard_observers + self.max_cross_shard_observers == 0:
            logger.warning(
                "No connections to observers are possible. This is NOT a recommended setting!"
            )
        provided = (
            self.max_intra_shard_validators
            + self.max_cross_shard_validators
            + self.max_intra_shard_observers
            + self.max_cross_shard_observers
            + self.max_seeders
        )
        if provided + MIN_UNKNOWN_PEERS > self.max_peer_count:
            raise InvalidValueError(
                "maxValidators + maxObservers + seeders should be less than "
                f"{self.max_peer_count}"
            )
        self.max_unknown = self.max_peer_count - provided

        self._self_peer_id = self_peer_id
        self._resolver = peer_resolver
        self._resolver_lock = threading.Lock()
        self._seeders: List[str] = []
        self._seeders_lock = threading.Lock()
        self._preferred_peers_holder = preferred_peers_holder
        self._compute_distance = compute_distance_by_counting_bits

    @property
    def peer_shard_resolver(self) -> PeerShardResolver:
        """The resolver currently used to classify peers."""
        with self._resolver_lock:
            return self._resolver

    def _peer_info(self, pid: PeerID):
        with self._resolver_lock:
            return self._resolver.get_peer_info(pid)

    def _split(self, pids: Iterable[PeerID]) -> Dict[_Category, List[PeerDistance]]:
        groups: Dict[_Category, List[PeerDistance]] = {c: [] for c in _Category}
        self_info = self._peer_info(self._self_peer_id)

        for pid in pids:
            pd = PeerDistance(pid, self._compute_distance(pid, self._self_peer_id))
            if self.is_seeder(pid):
                groups[_Category.SEEDERS].append(pd)
                continue

            info = self._peer_info(pid)
            if self._preferred_peers_holder.contains(pid):
                continue
            if info.peer_type == PeerType.UNKNOWN:
                groups[_Category.UNKNOWN].append(pd)
                continue

            cross = info.shard_id != self_info.shard_id
            if info.peer_type == PeerType.VALIDATOR:
                key = _Category.CROSS_SHARD_VALIDATORS if cross else _Category.INTRA_SHARD_VALIDATORS
            elif info.peer_type == PeerType.OBSERVER:
                key = _Category.CROSS_SHARD_OBSERVERS if cross else _Category.INTRA_SHARD_OBSERVERS
            else:
                continue
            groups[key].append(pd)

        return groups

    def compute_eviction_list(self, pids: Sequence[PeerID]) -> List[PeerID]:
        """Return the peers that should be disconnected."""
        groups = self._split(pids)

        keep_intra_val, spare = _used_and_spare(
            len(groups[_Category.INTRA_SHARD_VALIDATORS]), self.max_intra_shard_validators
        )
        keep_cross_val, spare = _used_and_spare(
            len(groups[_Category.CROSS_SHARD_VALIDATORS]), self.max_cross_shard_validators + spare
        )
        keep_intra_obs, spare = _used_and_spare(
            len(groups[_Category.INTRA_SHARD_OBSERVERS]), self.max_intra_shard_observers + spare
        )
        keep_cross_obs, spare = _used_and_spare(
            len(groups[_Category.CROSS_SHARD_OBSERVERS]), self.max_cross_shard_observers + spare
        )
        # spare room is never given to seeders
        keep_seeders, _ = _used_and_spare(len(groups[_Category.SEEDERS]), self.max_seeders)
        keep_unknown, _ = _used_and_spare(
            len(groups[_Category.UNKNOWN]), self.max_unknown + spare
        )

        keeps = (
            (_Category.INTRA_SHARD_VALIDATORS, keep_intra_val),
            (_Category.CROSS_SHARD_VALIDATORS, keep_cross_val),
            (_Category.INTRA_SHARD_OBSERVERS, keep_intra_obs),
            (_Category.CROSS_SHARD_OBSERVERS, keep_cross_obs),
            (_Category.SEEDERS, keep_seeders),
            (_Category.UNKNOWN, keep_unknown),
        )
        evicted: List[PeerID] = []
        for category, keep in keeps:
            evicted.extend(_evict(groups[category], keep))
        return evicted

    def has(self, pid: PeerID, pids: Iterable[PeerID]) -> bool:
        """Return True if ``pid`` is among ``pids``."""
        return _has(pid, pids)

    def is_seeder(self, pid: PeerID) -> bool:
        """Return True if any seeder address contains the peer's pretty ID."""
        pretty = pretty_peer_id(pid)
        with self._seeders_lock:
            return any(pretty in seeder for seeder in self._seeders)

    def set_seeders(self, addresses: Iterable[str]) -> None:
        """Replace the seeder addresses."""
        with self._seeders_lock:
            self._seeders = list(addresses)

    def set_peer_shard_resolver(self, resolver: PeerShardResolver) -> None:
        """Replace the peer shard resolver."""
        if resolver is None:
            raise NilPeerShardResolverError()
        with self._resolver_lock:
            self._resolver = resolver


class OneListSharder:
    """Shard-agnostic sharder keeping the nearest ``max_peer_count`` peers.

    Seeder addresses and a peer shard resolver may be handed over; they are
    recorded but play no part, since all peers are treated equally.
    """

    # no peer is ever singled out as a seeder by this sharder
    _seeder_ids: FrozenSet[PeerID] = frozenset()

    def __init__(self, self_peer_id: PeerID, max_peer_count: int) -> None:
        if max_peer_count < MIN_ALLOWED_CONNECTED_PEERS_ONE_SHARDER:
            raise InvalidValueError(
                f"maxPeerCount should be at least {MIN_ALLOWED_CONNECTED_PEERS_ONE_SHARDER}"
            )
        self.max_peer_count = max_peer_count
        self.seeders: Tuple[str, ...] = ()
        self.resolver: Optional[Any] = None
        self._self_peer_id = self_peer_id
        self._compute_distance = compute_distance_by_counting_bits

    def compute_eviction_list(self, pids: Sequence[PeerID]) -> List[PeerID]:
        """Return the farthest peers beyond the allowed count."""
        distances = [
            PeerDistance(pid, self._compute_distance(pid, self._self_peer_id)) for pid in pids
        ]
        return _evict(distances, self.max_peer_count)

    def has(self, pid: PeerID, pids: Iterable[PeerID]) -> bool:
        """Return True if ``pid`` is among ``pids``."""
        return _has(pid, pids)

    def is_seeder(self, pid: PeerID) -> bool:
        """All peers are treated equally, so no peer counts as a seeder."""
        return pid in self._seeder_ids

    def set_seeders(self, addresses: Iterable[str]) -> None:
        """Record the seeder addresses; they do not affect eviction."""
        self.seeders = tuple(addresses)

    def set_peer_shard_resolver(self, resolver: Any) -> None:
        """Record the resolver; shard information is not used."""
        self.resolver = resolver


class NilListSharder:
    """Sharder that never trims connections.

    It tracks no peer lists, so membership checks fail and every peer may
    connect to every other one.
    """

    _tracked: FrozenSet[PeerID] = frozenset()

    def __init__(self) -> None:
        self.seeders: Tuple[str, ...] = ()
        self.resolver: Optional[Any] = None

    def compute_eviction_list(self, pids: Any) -> List[PeerID]:
        """Keep every peer: the eviction list is always empty."""
        kept = list(pids or ())
        return _evict([PeerDistance(pid, 0) for pid in kept], len(kept))

    def has(self, pid: PeerID, pids: Any) -> bool:
        """No lists are tracked, so no peer is ever found."""
        return pid in self._tracked

    def is_seeder(self, pid: PeerID) -> bool:
        """No peer counts as a seeder."""
        return pid in self._tracked

    def set_seeders(self, addresses: Any) -> None:
        """Record the seeder addresses; they do not affect anything."""
        self.seeders = tuple(addresses or ())

    def set_peer_shard_resolver(self, resolver: Any) -> None:
        """Record the resolver; it is not used."""
        self.resolver = resolver