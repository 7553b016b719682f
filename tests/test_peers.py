from shardnet.peers import (
    P2PConfig,
    PeerInfo,
    PeerShardResolver,
    PeerType,
    PreferredPeersHolder,
    ShardingConfig,
    SharderType,
    pretty_peer_id,
)


def test_pretty_peer_id_known_value():
    assert pretty_peer_id(b"hello world") == "StV1DL6CwTryKyV"


def test_pretty_peer_id_leading_zero_bytes_become_ones():
    result = pretty_peer_id(b"\x00\x00\x01")
    assert result.startswith("11")
    assert len(result) == 3


def test_pretty_peer_id_str_and_bytes_agree():
    assert pretty_peer_id("pid") == pretty_peer_id(b"pid")


def test_pretty_peer_id_empty():
    assert pretty_peer_id(b"") == ""


def test_pretty_peer_id_distinct_inputs_differ():
    assert pretty_peer_id(b"pid1") != pretty_peer_id(b"pid2")
    assert pretty_peer_id(b"pid1") == pretty_peer_id(b"pid1")


def test_resolver_returns_unknown_for_missing_peer():
    resolver = PeerShardResolver()
    info = resolver.get_peer_info("whoever")
    assert info.peer_type is PeerType.UNKNOWN
    assert info == PeerInfo()


def test_resolver_returns_known_info():
    info = PeerInfo(peer_type=PeerType.VALIDATOR, shard_id=1)
    resolver = PeerShardResolver({"pid": info})
    assert resolver.get_peer_info("pid") is info
    assert resolver.get_peer_info("other").peer_type is PeerType.UNKNOWN


def test_preferred_peers_holder_contains():
    holder = PreferredPeersHolder(["a", "b"])
    assert holder.contains("a")
    assert holder.contains("b")
    assert not holder.contains("c")
    assert not PreferredPeersHolder().contains("a")


def test_config_holds_sharding_settings():
    config = P2PConfig(ShardingConfig(target_peer_count=25, type=SharderType.LISTS))
    assert config.sharding.target_peer_count == 25
    assert config.sharding.type is SharderType.LISTS
    assert P2PConfig().sharding == ShardingConfig()


def test_sharder_type_round_trip():
    for member in SharderType:
        assert SharderType(member.value) is member