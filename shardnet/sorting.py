"""Peers paired with their distance to a reference peer, and their ordering."""

from __future__ import annotations

from dataclasses import dataclass, field
from operator import attrgetter
from typing import Iterable, List

from .peers import PeerID

_by_distance = attrgetter("distance")


@dataclass
class PeerDistance:
    """A peer identifier with its distance to the current peer."""

    pid: PeerID
    distance: int


def sort_peer_distances(distances: Iterable[PeerDistance]) -> List[PeerDistance]:
    """Return the peer distances ordered from nearest to farthest."""
    return sorted(distances, key=_by_distance)


@dataclass
class SortedID:
    """Peer data used when ordering peers against a reference."""

    pid: PeerID
    key: bytes = b""
    shard: int = 0
    distance: int = 0


@dataclass
class SortedList:
    """Peers ordered by their distance to a reference peer."""

    ref: SortedID
    peers: List[SortedID] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.peers)

    def sorted_peers(self) -> List[PeerID]:
        """Sort the held peers by distance and return their identifiers."""
        self.peers.sort(key=_by_distance)
        return [peer.pid for peer in self.peers]