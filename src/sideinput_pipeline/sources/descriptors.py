"""Side-input descriptors: which shards to read and what shape to produce."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

import yaml

from sideinput_pipeline.errors import UnknownKindError

logger = logging.getLogger(__name__)


class SideInputKind(str, Enum):
    """Value shape a side input resolves to."""

    SINGLETON = "singleton"
    COLLECTION = "collection"

    @classmethod
    def parse(cls, tag: "SideInputKind | str") -> "SideInputKind":
        """Return the kind named by ``tag`` or raise UnknownKindError."""
        if isinstance(tag, cls):
            return tag
        if isinstance(tag, str):
            normalized = tag.strip().lower()
            for kind in cls:
                if kind.value == normalized:
                    return kind
        raise UnknownKindError(tag, [kind.value for kind in cls])


@dataclass(frozen=True)
class ShardRef:
    """Everything needed to open one physical shard."""

    location: str
    format: str = "records"
    options: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        # Own a read-only copy of the caller's options
        object.__setattr__(self, "options", MappingProxyType(dict(self.options)))

    @classmethod
    def from_dict(cls, data: "dict[str, Any] | str") -> "ShardRef":
        """Build a shard reference from a mapping or a bare location."""
        if isinstance(data, str):
            return cls(location=data)
        data = dict(data)
        return cls(
            location=data.pop("location"),
            format=data.pop("format", "records"),
            options=dict(data.pop("options", {}) or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"location": self.location, "format": self.format, "options": dict(self.options)}


@dataclass(frozen=True)
class SideInputDescriptor:
    """Ordered shard list plus the kind tag of one side input.

    ``kind`` is kept exactly as supplied. It is only interpreted when the
    descriptor is resolved, so a descriptor built upstream with a tag this
    worker does not know still loads and fails at resolution time.
    """

    shards: tuple[ShardRef, ...]
    kind: SideInputKind | str
    tag: str | None = None

    def __post_init__(self):
        # Accept any iterable of shards but store a tuple so the order is fixed.
        object.__setattr__(self, "shards", tuple(_as_shard(s) for s in self.shards))

    @property
    def num_shards(self) -> int:
        return len(self.shards)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SideInputDescriptor":
        """Create a descriptor from a dictionary."""
        if "kind" not in data:
            raise ValueError("Side input descriptor is missing required 'kind' field")
        return cls(
            shards=tuple(ShardRef.from_dict(s) for s in data.get("shards") or []),
            kind=data["kind"],
            tag=data.get("tag"),
        )

    @classmethod
    def from_yaml(cls, path: str) -> "SideInputDescriptor":
        """Load a descriptor from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        descriptor = cls.from_dict(data)
        logger.debug(f"Loaded side input descriptor from {path}: {descriptor.num_shards} shards")
        return descriptor

    def to_dict(self) -> dict[str, Any]:
        kind = self.kind.value if isinstance(self.kind, SideInputKind) else self.kind
        return {
            "tag": self.tag,
            "kind": kind,
            "shards": [s.to_dict() for s in self.shards],
        }


def _as_shard(shard: "ShardRef | str | dict[str, Any]") -> ShardRef:
    if isinstance(shard, ShardRef):
        return shard
    return ShardRef.from_dict(shard)


def create_singleton_descriptor(
    *shards: "ShardRef | str", tag: str | None = None
) -> SideInputDescriptor:
    """Descriptor for a side input expected to hold exactly one element."""
    return SideInputDescriptor(shards=shards, kind=SideInputKind.SINGLETON, tag=tag)


def create_collection_descriptor(
    *shards: "ShardRef | str", tag: str | None = None
) -> SideInputDescriptor:
    """Descriptor for a side input exposed as an iterable of elements."""
    return SideInputDescriptor(shards=shards, kind=SideInputKind.COLLECTION, tag=tag)
