"""Tests for lazy cross-shard sequencing."""

import itertools

import pytest

from sideinput_pipeline.coders import JsonCoder
from sideinput_pipeline.errors import DecodeError, ShardAccessError
from sideinput_pipeline.resolver import SideInputResolver
from sideinput_pipeline.sharding import ShardReader, ShardSequencer
from sideinput_pipeline.sources import ShardRef, create_singleton_descriptor


class TestOrdering:
    """Concatenation order across and within shards."""

    def test_sharded_sequence_order(self, make_reader, int_coder):
        reader, shards = make_reader([3], [], [4, 5], [6], [])
        sequencer = ShardSequencer(reader, int_coder)
        assert list(sequencer.sequence(shards)) == [3, 4, 5, 6]

    def test_empty_shard_list(self, make_reader, int_coder):
        reader, _ = make_reader()
        assert list(ShardSequencer(reader, int_coder).sequence([])) == []
        assert reader.opened == []

    def test_all_shards_empty(self, make_reader, int_coder):
        reader, shards = make_reader([], [], [])
        assert list(ShardSequencer(reader, int_coder).sequence(shards)) == []
        assert reader.opened == reader.closed == ["shard-0", "shard-1", "shard-2"]

    def test_each_call_is_a_fresh_pass(self, make_reader, int_coder):
        reader, shards = make_reader([1, 2], [3])
        sequencer = ShardSequencer(reader, int_coder)
        first = sequencer.sequence(shards)
        assert list(first) == [1, 2, 3]
        assert list(first) == []
        assert list(sequencer.sequence(shards)) == [1, 2, 3]
        assert reader.opened.count("shard-0") == 2


class TestLaziness:
    """Shards are opened one at a time and only on demand."""

    def test_nothing_opened_at_construction(self, make_reader, int_coder):
        reader, shards = make_reader([1], [2])
        ShardSequencer(reader, int_coder).sequence(shards)
        assert reader.opened == []

    def test_next_shard_opened_only_after_previous_exhausted(self, make_reader, int_coder):
        reader, shards = make_reader([3], [], [4, 5], [6])
        elements = ShardSequencer(reader, int_coder).sequence(shards)

        assert next(elements) == 3
        assert reader.opened == ["shard-0"]
        assert reader.closed == []

        assert next(elements) == 4
        assert reader.opened == ["shard-0", "shard-1", "shard-2"]
        assert reader.closed == ["shard-0", "shard-1"]
        elements.close()

    def test_unbounded_shard_is_read_incrementally(self, recording_reader, int_coder):
        reader = recording_reader({"endless": lambda: (int_coder.encode(i) for i in itertools.count())})
        elements = ShardSequencer(reader, int_coder).sequence([ShardRef("endless")])
        assert list(itertools.islice(elements, 5)) == [0, 1, 2, 3, 4]
        assert reader.pulled["endless"] == 5
        elements.close()


class TestResourceRelease:
    """Every opened shard is closed exactly once."""

    def test_full_consumption_closes_each_shard_once(self, make_reader, int_coder):
        reader, shards = make_reader([1], [2, 3], [4])
        list(ShardSequencer(reader, int_coder).sequence(shards))
        assert sorted(reader.opened) == sorted(reader.closed)
        assert len(reader.closed) == 3

    def test_early_close_releases_open_shard(self, make_reader, int_coder):
        reader, shards = make_reader([1, 2, 3], [4])
        elements = ShardSequencer(reader, int_coder).sequence(shards)
        assert next(elements) == 1
        elements.close()
        assert reader.opened == ["shard-0"]
        assert reader.closed == ["shard-0"]

    def test_break_out_of_loop_releases_shard(self, make_reader, int_coder):
        reader, shards = make_reader([1, 2, 3])
        elements = ShardSequencer(reader, int_coder).sequence(shards)
        for value in elements:
            if value == 2:
                break
        elements.close()
        assert reader.closed == ["shard-0"]


class TestErrors:
    """Failures surface lazily, tagged with the offending shard."""

    def test_open_failure_is_lazy_and_tagged(self, recording_reader, int_coder):
        def broken():
            raise OSError("disk on fire")

        reader = recording_reader({"good": lambda: [int_coder.encode(7)], "bad": broken})
        shards = [ShardRef("good"), ShardRef("bad")]
        elements = ShardSequencer(reader, int_coder).sequence(shards)

        assert next(elements) == 7
        with pytest.raises(ShardAccessError) as exc_info:
            next(elements)

        assert exc_info.value.shard == ShardRef("bad")
        assert exc_info.value.index == 1
        assert isinstance(exc_info.value.__cause__, OSError)
        assert reader.closed == ["good"]

    def test_missing_shard_is_shard_access_error(self, make_reader, int_coder):
        reader, _ = make_reader()
        elements = ShardSequencer(reader, int_coder).sequence([ShardRef("nowhere")])
        with pytest.raises(ShardAccessError):
            list(elements)

    def test_mid_read_failure_closes_shard(self, recording_reader, int_coder):
        def flaky():
            yield int_coder.encode(1)
            raise OSError("connection reset")

        reader = recording_reader({"flaky": flaky})
        elements = ShardSequencer(reader, int_coder).sequence([ShardRef("flaky")])

        assert next(elements) == 1
        with pytest.raises(ShardAccessError, match="connection reset"):
            next(elements)
        assert reader.closed == ["flaky"]

    def test_decode_failure_reports_position(self, recording_reader):
        reader = recording_reader({"docs": lambda: [b'{"a": 1}', b"{not json"]})
        elements = ShardSequencer(reader, JsonCoder()).sequence([ShardRef("docs")])

        assert next(elements) == {"a": 1}
        with pytest.raises(DecodeError) as exc_info:
            next(elements)

        assert exc_info.value.position == 1
        assert exc_info.value.shard.location == "docs"
        assert reader.closed == ["docs"]

    def test_decode_error_is_not_shard_access_error(self, recording_reader, int_coder):
        reader = recording_reader({"short": lambda: [b"\x00\x01"]})
        elements = ShardSequencer(reader, int_coder).sequence([ShardRef("short")])
        with pytest.raises(DecodeError):
            next(elements)


class PlainIteratorReader(ShardReader):
    """Reader whose shards come back as bare iterators or lists, with no close()."""

    def __init__(self, shards, as_list=False):
        self.shards = shards
        self.as_list = as_list

    def open(self, shard):
        records = list(self.shards[shard.location])
        return records if self.as_list else iter(records)


class TestReadersWithoutClose:
    """Readers returning plain iterables are read without a release step."""

    def test_plain_iterator_shards(self, int_coder):
        reader = PlainIteratorReader(
            {"a": [int_coder.encode(3)], "b": [], "c": [int_coder.encode(4), int_coder.encode(5)]}
        )
        shards = [ShardRef("a"), ShardRef("b"), ShardRef("c")]
        assert list(ShardSequencer(reader, int_coder).sequence(shards)) == [3, 4, 5]

    def test_plain_list_shards(self, int_coder):
        reader = PlainIteratorReader({"a": [int_coder.encode(1), int_coder.encode(2)]}, as_list=True)
        assert list(ShardSequencer(reader, int_coder).sequence([ShardRef("a")])) == [1, 2]

    def test_singleton_from_plain_iterator(self, int_coder):
        reader = PlainIteratorReader({"a": [int_coder.encode(42)]})
        resolver = SideInputResolver(reader, int_coder)
        assert resolver.resolve(create_singleton_descriptor("a")) == 42

    def test_early_close_with_plain_iterator(self, int_coder):
        reader = PlainIteratorReader({"a": [int_coder.encode(1), int_coder.encode(2)]})
        elements = ShardSequencer(reader, int_coder).sequence([ShardRef("a")])
        assert next(elements) == 1
        elements.close()

    def test_decode_error_with_plain_iterator(self, int_coder):
        reader = PlainIteratorReader({"a": [b"\x00"]})
        with pytest.raises(DecodeError):
            list(ShardSequencer(reader, int_coder).sequence([ShardRef("a")]))
