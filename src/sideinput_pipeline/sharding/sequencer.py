"""Lazy, ordered concatenation of shards into one element sequence."""

import logging
from collections.abc import Iterable, Iterator
from contextlib import ExitStack
from typing import Any

from sideinput_pipeline.coders.coders import Coder
from sideinput_pipeline.errors import DecodeError, ShardAccessError
from sideinput_pipeline.sharding.shard_reader import ShardReader
from sideinput_pipeline.sources.descriptors import ShardRef

logger = logging.getLogger(__name__)


class ShardSequencer:
    """Concatenate the decoded elements of a list of shards.

    Shards are opened one at a time, in list order, and only once the
    previous shard is exhausted. Each opened shard is closed exactly once,
    whether it is read to the end, fails, or the caller stops consuming.
    """

    def __init__(self, reader: ShardReader, coder: Coder):
        self.reader = reader
        self.coder = coder

    def sequence(self, shards: Iterable[ShardRef]) -> Iterator[Any]:
        """Return a fresh lazy sequence over ``shards``.

        Nothing is opened until the first element is requested. The returned
        generator can be consumed once; call ``sequence`` again for another pass.
        """
        shards = list(shards)
        for index, shard in enumerate(shards):
            yield from self._read_shard(index, shard)

    def _read_shard(self, index: int, shard: ShardRef) -> Iterator[Any]:
        logger.debug(f"Opening shard {index}: {shard.location} ({shard.format})")
        try:
            stream = self.reader.open(shard)
            records = iter(stream)
        except Exception as e:
            raise ShardAccessError(shard, index, e) from e

        position = 0
        with ExitStack() as stack:
            # Plain iterators and lists have nothing to release
            close = getattr(stream, "close", None)
            if close is not None:
                stack.callback(close)
            while True:
                try:
                    raw = next(records)
                except StopIteration:
                    break
                except Exception as e:
                    raise ShardAccessError(shard, index, e) from e

                try:
                    element = self.coder.decode(raw)
                except Exception as e:
                    raise DecodeError(shard, position, e) from e

                yield element
                position += 1

        logger.debug(f"Closed shard {index}: {shard.location} after {position} records")
