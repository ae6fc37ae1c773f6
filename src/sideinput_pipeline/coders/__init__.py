"""Coders module."""

from sideinput_pipeline.coders.coders import (
    CODER_REGISTRY,
    BigEndianIntegerCoder,
    BigEndianLongCoder,
    BytesCoder,
    Coder,
    JsonCoder,
    NdarrayCoder,
    StrUtf8Coder,
    create_coder,
)

__all__ = [
    "Coder",
    "BytesCoder",
    "StrUtf8Coder",
    "BigEndianIntegerCoder",
    "BigEndianLongCoder",
    "JsonCoder",
    "NdarrayCoder",
    "CODER_REGISTRY",
    "create_coder",
]
