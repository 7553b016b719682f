"""Shard-aware peer eviction, connection metrics, connection watchers and per-key locks."""

__version__ = "0.1.0"

__all__ = [
    "errors",
    "peers",
    "mutex_holder",
    "metrics",
    "sorting",
    "sharding",
    "sharder_factory",
]