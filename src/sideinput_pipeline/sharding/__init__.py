"""Sharding module."""

from sideinput_pipeline.sharding.sequencer import ShardSequencer
from sideinput_pipeline.sharding.shard_reader import (
    InMemoryShardReader,
    LocalShardReader,
    ShardReader,
    create_shard_reader,
    write_record_shard,
)

__all__ = [
    "ShardSequencer",
    "ShardReader",
    "InMemoryShardReader",
    "LocalShardReader",
    "create_shard_reader",
    "write_record_shard",
]
