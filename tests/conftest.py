"""Shared fixtures for side-input tests."""

from collections.abc import Callable, Iterable, Iterator
from typing import Any

import pytest

from sideinput_pipeline.coders import BigEndianIntegerCoder
from sideinput_pipeline.sharding import ShardReader
from sideinput_pipeline.sources import ShardRef


class RecordingReader(ShardReader):
    """Reader over record factories that logs every open, pull and close."""

    def __init__(self, shards: dict[str, Callable[[], Iterable[Any]]]):
        self.shards = shards
        self.opened: list[str] = []
        self.closed: list[str] = []
        self.pulled: dict[str, int] = {}

    def open(self, shard: ShardRef) -> Iterator[Any]:
        factory = self.shards[shard.location]
        self.opened.append(shard.location)
        return self._iterate(shard.location, factory())

    def _iterate(self, location: str, records: Iterable[Any]) -> Iterator[Any]:
        self.pulled.setdefault(location, 0)
        try:
            for record in records:
                self.pulled[location] += 1
                yield record
        finally:
            self.closed.append(location)


@pytest.fixture()
def int_coder():
    return BigEndianIntegerCoder()


@pytest.fixture()
def make_reader(int_coder):
    """Build a RecordingReader from lists of ints, one list per shard."""

    def _make(*shards: list[int]) -> tuple[RecordingReader, list[ShardRef]]:
        factories = {}
        refs = []
        for i, values in enumerate(shards):
            name = f"shard-{i}"
            factories[name] = lambda values=values: [int_coder.encode(v) for v in values]
            refs.append(ShardRef(location=name, format="memory"))
        return RecordingReader(factories), refs

    return _make


@pytest.fixture()
def recording_reader():
    """The RecordingReader class, for tests that need custom record factories."""
    return RecordingReader
