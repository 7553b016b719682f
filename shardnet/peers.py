"""Peer identifiers, peer metadata and sharding configuration."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional, Union

PeerID = Union[str, bytes]

_BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"


def _peer_bytes(pid: PeerID) -> bytes:
    return pid if isinstance(pid, bytes) else pid.encode("utf-8")


def pretty_peer_id(pid: PeerID) -> str:
    """Return the base58 form of a peer identifier."""
    data = _peer_bytes(pid)
    number = int.from_bytes(data, "big")
    digits = []
    while number:
        number, remainder = divmod(number, 58)
        digits.append(_BASE58_ALPHABET[remainder])
    leading_zeros = len(data) - len(data.lstrip(b"\0"))
    return "1" * leading_zeros + "".join(reversed(digits))


class PeerType(enum.IntEnum):
    """Role a peer plays in the network."""

    UNKNOWN = 0
    VALIDATOR = 1
    OBSERVER = 2


@dataclass
class PeerInfo:
    """What is known about a peer."""

    peer_type: PeerType = PeerType.UNKNOWN
    peer_sub_type: int = 0
    shard_id: int = 0
    pk_bytes: bytes = b""


class SharderType(str, enum.Enum):
    """Available connection sharding strategies."""

    LISTS = "ListsSharder"
    ONE_LIST = "OneListSharder"
    NIL_LIST = "NilListSharder"


@dataclass
class ShardingConfig:
    """Limits on how many peers of each kind are kept connected."""

    target_peer_count: int = 0
    max_intra_shard_validators: int = 0
    max_cross_shard_validators: int = 0
    max_intra_shard_observers: int = 0
    max_cross_shard_observers: int = 0
    max_seeders: int = 0
    type: str = ""


@dataclass
class P2PConfig:
    """Network configuration relevant to sharding."""

    sharding: ShardingConfig = field(default_factory=ShardingConfig)


class PeerShardResolver:
    """Resolves peer information from a mapping; unknown peers get default info."""

    def __init__(self, known: Optional[Mapping[PeerID, PeerInfo]] = None) -> None:
        self._known = dict(known or {})

    def get_peer_info(self, pid: PeerID) -> PeerInfo:
        """Return the information held for ``pid``, or an unknown-peer record."""
        info = self._known.get(pid)
        return info if info is not None else PeerInfo()


class PreferredPeersHolder:
    """Holds the set of peers that must never be evicted."""

    def __init__(self, peers: Iterable[PeerID] = ()) -> None:
        self._peers = set(peers)

    def contains(self, pid: PeerID) -> bool:
        """Return True if ``pid`` is a preferred peer."""
        return pid in self._peers