"""Shard readers: open one physical shard and stream its raw records."""

import logging
import struct
from abc import ABC, abstractmethod
from collections import Counter
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

import numpy as np

from sideinput_pipeline.coders.coders import Coder
from sideinput_pipeline.sources.descriptors import ShardRef

logger = logging.getLogger(__name__)

_LENGTH_PREFIX = struct.Struct(">I")


class ShardReader(ABC):
    """Abstract base class for shard readers.

    ``open`` returns an iterable over the shard's raw records in shard order.
    Readers holding resources return an object with ``close()`` (a generator
    is enough) so callers can release the shard when they stop early. Every
    call to ``open`` must be independent of any other call for the same shard.
    """

    @abstractmethod
    def open(self, shard: ShardRef) -> Iterable[Any]:
        """Open a shard and iterate its raw records."""
        pass


class InMemoryShardReader(ShardReader):
    """Serve shards from memory, keyed by shard location."""

    def __init__(self, shards: dict[str, list[Any]] | None = None):
        self.shards: dict[str, list[Any]] = dict(shards or {})
        self.opened: Counter = Counter()
        self.closed: Counter = Counter()

    @classmethod
    def from_elements(cls, coder: Coder, **shards: Iterable[Any]) -> "InMemoryShardReader":
        """Encode Python values with ``coder`` and store them as raw records."""
        return cls({name: [coder.encode(v) for v in values] for name, values in shards.items()})

    def add_shard(self, location: str, records: Iterable[Any]) -> ShardRef:
        self.shards[location] = list(records)
        return ShardRef(location=location, format="memory")

    def open(self, shard: ShardRef) -> Iterator[Any]:
        # KeyError here surfaces before the first record, like a missing file
        records = self.shards[shard.location]
        return self._iterate(shard.location, records)

    def _iterate(self, location: str, records: list[Any]) -> Iterator[Any]:
        self.opened[location] += 1
        try:
            yield from records
        finally:
            self.closed[location] += 1


class LocalShardReader(ShardReader):
    """Read shard files from the local filesystem.

    Supported formats (``ShardRef.format``):
        records:     4-byte big-endian length prefix followed by the payload
        lines:       one record per line, line terminator stripped
        npy:         NumPy array, one record per row of the leading axis
        safetensors: one record per row of tensor ``options["key"]``, which may
                     be omitted when the file holds a single tensor
    """

    FORMATS = ("records", "lines", "npy", "safetensors")

    def __init__(self, base_dir: str = "."):
        self.base_dir = Path(base_dir)

    def resolve_path(self, shard: ShardRef) -> Path:
        path = Path(shard.location)
        if not path.is_absolute():
            path = self.base_dir / path
        return path

    def open(self, shard: ShardRef) -> Iterator[Any]:
        path = self.resolve_path(shard)
        if shard.format == "records":
            return self._iterate_records(path)
        if shard.format == "lines":
            return self._iterate_lines(path)
        if shard.format == "npy":
            return self._iterate_npy(path)
        if shard.format == "safetensors":
            return self._iterate_safetensors(path, shard.options.get("key"))
        raise ValueError(f"Unknown shard format: {shard.format}. Available: {list(self.FORMATS)}")

    def _iterate_records(self, path: Path) -> Iterator[bytes]:
        with open(path, "rb") as f:
            while True:
                header = f.read(_LENGTH_PREFIX.size)
                if not header:
                    return
                if len(header) < _LENGTH_PREFIX.size:
                    raise EOFError(f"Truncated record header in {path}")
                (length,) = _LENGTH_PREFIX.unpack(header)
                payload = f.read(length)
                if len(payload) < length:
                    raise EOFError(f"Truncated record in {path}: expected {length} bytes")
                yield payload

    def _iterate_lines(self, path: Path) -> Iterator[bytes]:
        with open(path, "rb") as f:
            for line in f:
                yield line.rstrip(b"\r\n")

    def _iterate_npy(self, path: Path) -> Iterator[np.ndarray]:
        # Memory-mapped so only the rows actually consumed are paged in
        array = np.load(path, mmap_mode="r", allow_pickle=False)
        yield from array

    def _iterate_safetensors(self, path: Path, key: str | None) -> Iterator[np.ndarray]:
        try:
            from safetensors.numpy import load_file
        except ImportError:
            logger.error("safetensors not installed. Install with: pip install safetensors")
            raise

        tensors = load_file(str(path))
        if key is None:
            if len(tensors) != 1:
                raise ValueError(
                    f"{path} holds {len(tensors)} tensors; set options.key to one of {sorted(tensors)}"
                )
            (key,) = tensors
        if key not in tensors:
            raise KeyError(f"Tensor '{key}' not found in {path}. Available: {sorted(tensors)}")
        yield from tensors[key]


def create_shard_reader(backend: str, **kwargs) -> ShardReader:
    """Create a shard reader."""
    backends = {
        "local": LocalShardReader,
        "memory": InMemoryShardReader,
    }

    if backend not in backends:
        raise ValueError(f"Unknown reader backend: {backend}. Available: {list(backends.keys())}")

    return backends[backend](**kwargs)


def write_record_shard(path: str, records: Iterable[bytes]) -> int:
    """Write length-prefixed records to ``path`` and return the record count."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with open(path, "wb") as f:
        for record in records:
            record = bytes(record)
            f.write(_LENGTH_PREFIX.pack(len(record)))
            f.write(record)
            count += 1
    logger.info(f"Wrote shard {path.name}: {count} records")
    return count
