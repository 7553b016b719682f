import logging

import pytest

from shardnet.errors import InvalidValueError, NilLoggerError
from shardnet.peers import (
    P2PConfig,
    PeerShardResolver,
    PreferredPeersHolder,
    SharderType,
    ShardingConfig,
)
from shardnet.sharder_factory import new_sharder
from shardnet.sharding import ListsSharder, NilListSharder, OneListSharder


def _make_args(sharder_type="unknown"):
    config = P2PConfig(
        sharding=ShardingConfig(
            type=sharder_type,
            target_peer_count=6,
            max_intra_shard_validators=1,
            max_cross_shard_validators=1,
            max_intra_shard_observers=1,
            max_cross_shard_observers=1,
        )
    )
    return dict(
        peer_shard_resolver=PeerShardResolver(),
        pid="",
        p2p_config=config,
        preferred_peers_holder=PreferredPeersHolder(),
        logger=logging.getLogger("shardnet.tests.factory"),
    )


def test_create_lists_sharder():
    sharder = new_sharder(**_make_args(SharderType.LISTS.value))
    assert isinstance(sharder, ListsSharder)
    assert sharder.max_peer_count == 6
    assert sharder.max_unknown == 2


def test_create_lists_sharder_from_enum_member():
    sharder = new_sharder(**_make_args(SharderType.LISTS))
    assert isinstance(sharder, ListsSharder)
    assert sharder.max_peer_count == 6
    assert sharder.max_unknown == 2


def test_create_one_list_sharder():
    sharder = new_sharder(**_make_args(SharderType.ONE_LIST.value))
    assert isinstance(sharder, OneListSharder)
    assert sharder.max_peer_count == 6


def test_create_nil_list_sharder():
    sharder = new_sharder(**_make_args(SharderType.NIL_LIST.value))
    assert isinstance(sharder, NilListSharder)
    assert sharder.compute_eviction_list(["a", "b"]) == []


def test_unknown_variant_raises():
    with pytest.raises(InvalidValueError) as info:
        new_sharder(**_make_args("unknown"))
    assert "unknown" in str(info.value)


def test_nil_logger_raises():
    args = _make_args(SharderType.NIL_LIST.value)
    args["logger"] = None
    with pytest.raises(NilLoggerError):
        new_sharder(**args)


def test_lists_sharder_config_errors_propagate():
    args = _make_args(SharderType.LISTS.value)
    args["p2p_config"].sharding.target_peer_count = 4
    with pytest.raises(InvalidValueError):
        new_sharder(**args)


def test_one_list_sharder_config_errors_propagate():
    args = _make_args(SharderType.ONE_LIST.value)
    args["p2p_config"].sharding.target_peer_count = 2
    with pytest.raises(InvalidValueError):
        new_sharder(**args)