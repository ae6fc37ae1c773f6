"""Side-input descriptor module."""

from sideinput_pipeline.sources.descriptors import (
    ShardRef,
    SideInputDescriptor,
    SideInputKind,
    create_collection_descriptor,
    create_singleton_descriptor,
)

__all__ = [
    "ShardRef",
    "SideInputDescriptor",
    "SideInputKind",
    "create_singleton_descriptor",
    "create_collection_descriptor",
]
