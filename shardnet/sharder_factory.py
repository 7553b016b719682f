"""Creates the connection sharder selected by the sharding configuration."""

from __future__ import annotations

from typing import Any, Union

from .errors import InvalidValueError, NilLoggerError
from .peers import P2PConfig, PeerID, PeerShardResolver, SharderType
from .sharding import ListsSharder, NilListSharder, OneListSharder

Sharder = Union[ListsSharder, OneListSharder, NilListSharder]


def new_sharder(
    peer_shard_resolver: PeerShardResolver,
    pid: PeerID,
    p2p_config: P2PConfig,
    preferred_peers_holder: Any,
    logger: Any,
) -> Sharder:
    """Build the sharder named by ``p2p_config.sharding.type``."""
    if logger is None:
        raise NilLoggerError()

    sharding = p2p_config.sharding
    try:
        kind = SharderType(sharding.type)
    except ValueError:
        raise InvalidValueError(
            f"when selecting sharder: unknown {sharding.type} value"
        ) from None

    if kind is SharderType.LISTS:
        logger.debug(
            "using lists sharder MaxConnectionCount=%s MaxIntraShardValidators=%s "
            "MaxCrossShardValidators=%s MaxIntraShardObservers=%s "
            "MaxCrossShardObservers=%s MaxSeeders=%s",
            sharding.target_peer_count,
            sharding.max_intra_shard_validators,
            sharding.max_cross_shard_validators,
            sharding.max_intra_shard_observers,
            sharding.max_cross_shard_observers,
            sharding.max_seeders,
        )
        return ListsSharder(
            peer_shard_resolver, pid, p2p_config, preferred_peers_holder, logger
        )

    if kind is SharderType.ONE_LIST:
        logger.debug(
            "using one list sharder MaxConnectionCount=%s", sharding.target_peer_count
        )
        return OneListSharder(pid, sharding.target_peer_count)

    logger.debug("using nil list sharder")
    return NilListSharder()