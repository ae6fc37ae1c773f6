"""
Side Input Pipeline

Resolves broadcast (side) inputs for a batch/stream worker: reads the shards
named by a descriptor, in order, and hands the consuming stage either a single
value or a lazy collection.

Usage:
    from sideinput_pipeline import SideInputResolver, ResolverConfig
    from sideinput_pipeline.sources import create_singleton_descriptor

    resolver = SideInputResolver.from_config(ResolverConfig(coder="big_endian_int"))
    value = resolver.resolve(create_singleton_descriptor("weights-00000.rec"))
"""

__version__ = "1.0.0"

from sideinput_pipeline.config.resolver_config import ResolverConfig
from sideinput_pipeline.errors import (
    CardinalityError,
    DecodeError,
    ShardAccessError,
    SideInputError,
    UnknownKindError,
)
from sideinput_pipeline.resolver import SideInputResolver, resolve_side_input
from sideinput_pipeline.sources.descriptors import ShardRef, SideInputDescriptor, SideInputKind

__all__ = [
    "SideInputResolver",
    "resolve_side_input",
    "ResolverConfig",
    "ShardRef",
    "SideInputDescriptor",
    "SideInputKind",
    "SideInputError",
    "ShardAccessError",
    "DecodeError",
    "CardinalityError",
    "UnknownKindError",
    "__version__",
]
