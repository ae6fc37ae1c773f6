"""Coders converting between raw shard records and Python values."""

import json
import struct
from abc import ABC, abstractmethod
from typing import Any

import numpy as np


class Coder(ABC):
    """Abstract base class for element coders."""

    @abstractmethod
    def encode(self, value: Any) -> Any:
        """Encode a value into a raw record."""
        pass

    @abstractmethod
    def decode(self, raw: Any) -> Any:
        """Decode a raw record into a value."""
        pass

    @property
    def name(self) -> str:
        return type(self).__name__


class BytesCoder(Coder):
    """Pass raw bytes through unchanged."""

    def encode(self, value: bytes) -> bytes:
        return bytes(value)

    def decode(self, raw: bytes) -> bytes:
        return bytes(raw)


class StrUtf8Coder(Coder):
    """UTF-8 text."""

    def encode(self, value: str) -> bytes:
        return value.encode("utf-8")

    def decode(self, raw: bytes) -> str:
        return bytes(raw).decode("utf-8")


class _FixedWidthIntegerCoder(Coder):
    """Signed big-endian integer of a fixed width."""

    fmt = ">i"

    def encode(self, value: int) -> bytes:
        return struct.pack(self.fmt, value)

    def decode(self, raw: bytes) -> int:
        # struct.error on anything but the exact width
        return struct.unpack(self.fmt, bytes(raw))[0]


class BigEndianIntegerCoder(_FixedWidthIntegerCoder):
    """Signed 32-bit big-endian integer."""

    fmt = ">i"


class BigEndianLongCoder(_FixedWidthIntegerCoder):
    """Signed 64-bit big-endian integer."""

    fmt = ">q"


class JsonCoder(Coder):
    """UTF-8 encoded JSON documents."""

    def encode(self, value: Any) -> bytes:
        return json.dumps(value, separators=(",", ":")).encode("utf-8")

    def decode(self, raw: bytes) -> Any:
        return json.loads(bytes(raw).decode("utf-8"))


class NdarrayCoder(Coder):
    """Rows of a NumPy array, decoded to plain Python lists or scalars."""

    def __init__(self, dtype: str | None = None):
        self.dtype = np.dtype(dtype) if dtype else None

    def encode(self, value: Any) -> np.ndarray:
        return np.asarray(value, dtype=self.dtype)

    def decode(self, raw: Any) -> Any:
        return np.asarray(raw, dtype=self.dtype).tolist()


CODER_REGISTRY: dict[str, type[Coder]] = {
    "bytes": BytesCoder,
    "utf8": StrUtf8Coder,
    "big_endian_int": BigEndianIntegerCoder,
    "big_endian_long": BigEndianLongCoder,
    "json": JsonCoder,
    "ndarray": NdarrayCoder,
}


def create_coder(name: str, **kwargs) -> Coder:
    """Create a coder from the registry."""
    if name not in CODER_REGISTRY:
        raise ValueError(f"Unknown coder: {name}. Available: {list(CODER_REGISTRY.keys())}")
    return CODER_REGISTRY[name](**kwargs)
