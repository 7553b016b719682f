# shardnet

Building blocks for a shard-aware peer-to-peer node. shardnet works out which
connected peers a node should drop, counts connections, and reports peers the
first time they are seen. It uses only the standard library.

## Modules

- `shardnet.peers`: peer data and configuration.
  - `PeerType` (`UNKNOWN`, `VALIDATOR`, `OBSERVER`) and the `PeerInfo`
    dataclass (`peer_type`, `peer_sub_type`, `shard_id`, `pk_bytes`).
  - `ShardingConfig` holds `target_peer_count`, `max_intra_shard_validators`,
    `max_cross_shard_validators`, `max_intra_shard_observers`,
    `max_cross_shard_observers`, `max_seeders` and `type`. `P2PConfig` wraps it
    as `sharding`.
  - `SharderType` has the members `LISTS`, `ONE_LIST` and `NIL_LIST`.
  - `PeerShardResolver` looks peers up in a mapping. A peer that is not in the
    mapping gets a default `PeerInfo`, which means an unknown peer in shard 0.
  - `PreferredPeersHolder` holds a set of peers that are exempt from eviction.
  - `pretty_peer_id` gives the base58 form of a peer ID. A peer ID is `str` or
    `bytes`.
- `shardnet.sharding`: sharders that build an eviction list.
  - `ListsSharder` puts peers into intra-shard validators, cross-shard
    validators, intra-shard observers, cross-shard observers, seeders and
    unknown peers, and gives each group its own limit. Unused room in the
    validator and observer groups passes on down the list and ends with the
    unknown group. The seeder limit is fixed. A peer counts as a seeder if any
    address given to `set_seeders` contains its pretty ID. Preferred peers that
    are not seeders are never evicted. Inside each group the peers farthest by
    distance are evicted first. The constructor raises `InvalidValueError` if a
    limit is below its minimum (target peer count 5, each validator and
    observer limit 1) or if the limits leave no room for at least one unknown
    peer.
  - `OneListSharder` ignores shards and keeps the `max_peer_count` peers that
    are closest. The minimum for `max_peer_count` is 3.
  - `NilListSharder` never evicts anyone, and its `has` always returns `False`.
  - `compute_distance_by_counting_bits` and `compute_distance_log2_based`
    measure Kademlia distance between the SHA-256 hashes of two peer IDs.
- `shardnet.sharder_factory.new_sharder` builds the sharder named by
  `p2p_config.sharding.type`.
- `shardnet.metrics`: connection metrics.
  - `ConnectionsMetric` counts connections and disconnections.
    `reset_num_connections` and `reset_num_disconnections` return the count so
    far and set it back to zero. It also keeps the addresses it is told the
    network listens on, in `listen_addresses`.
  - `PrintConnectionsWatcher` reports each peer once per time-to-live window,
    through `log_print_handler` unless you give it your own handler. A
    background thread sweeps expired entries until `close()` is called.
    `time_to_live` must be at least one second.
  - `DisabledConnectionsWatcher` reports nothing.
  - `TimeCache` holds keys that expire and are removed by `sweep()`.
  - `new_connections_watcher` picks a watcher from a `ConnectionWatcherType`
    (`PRINT`, `DISABLED`, or `EMPTY` for the empty string).
  - Both watchers work as context managers.
- `shardnet.mutex_holder`: `MutexHolder` hands out one `threading.Lock` per
  key and keeps the locks in an `LRUCache` of fixed, positive capacity.
- `shardnet.sorting`: `PeerDistance`, `sort_peer_distances`, `SortedID` and
  `SortedList`.
- `shardnet.errors`: every exception derives from `P2PError`. The subclasses
  are `InvalidValueError`, `MissingComponentError` (with
  `NilPeerShardResolverError`, `NilPreferredPeersHolderError` and
  `NilLoggerError`), `InvalidTimeToLiveError` and
  `UnknownConnectionWatcherTypeError`. All of them are also `ValueError`s.

## Installation

```
pip install shardnet
```

## Example

```python
import logging

from shardnet.peers import (
    P2PConfig,
    PeerInfo,
    PeerShardResolver,
    PeerType,
    PreferredPeersHolder,
    ShardingConfig,
    SharderType,
)
from shardnet.sharder_factory import new_sharder

resolver = PeerShardResolver({
    b"self": PeerInfo(peer_type=PeerType.VALIDATOR, shard_id=0),
    b"peer-a": PeerInfo(peer_type=PeerType.OBSERVER, shard_id=0),
    b"peer-b": PeerInfo(peer_type=PeerType.OBSERVER, shard_id=0),
    b"peer-c": PeerInfo(peer_type=PeerType.OBSERVER, shard_id=1),
})
config = P2PConfig(
    sharding=ShardingConfig(
        type=SharderType.LISTS,
        target_peer_count=6,
        max_intra_shard_validators=1,
        max_cross_shard_validators=1,
        max_intra_shard_observers=1,
        max_cross_shard_observers=1,
    )
)
sharder = new_sharder(
    resolver, b"self", config, PreferredPeersHolder(), logging.getLogger("p2p")
)
to_drop = sharder.compute_eviction_list([b"peer-a", b"peer-b", b"peer-c"])
```

Watching connections:

```python
import logging

from shardnet.metrics import ConnectionWatcherType, new_connections_watcher

with new_connections_watcher(
    ConnectionWatcherType.PRINT, 3600.0, logging.getLogger("p2p")
) as watcher:
    watcher.new_known_connection(b"peer-a", "/ip4/127.0.0.1/tcp/10000")
```

## What it does not do

shardnet opens no sockets and includes no network host, transport, message
broadcasting or peer discovery. It only decides which peers to drop and keeps
track of connection events. Your own networking code has to call it and act on
what it returns.

## Running the tests

```
pip install -e ".[test]"
pytest
```