"""Resolve side-input descriptors into the values a stage consumes."""

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from sideinput_pipeline.coders.coders import Coder, create_coder
from sideinput_pipeline.config.resolver_config import ResolverConfig
from sideinput_pipeline.errors import CardinalityError
from sideinput_pipeline.sharding.sequencer import ShardSequencer
from sideinput_pipeline.sharding.shard_reader import ShardReader, create_shard_reader
from sideinput_pipeline.sources.descriptors import SideInputDescriptor, SideInputKind

logger = logging.getLogger(__name__)

_MISSING = object()


class SideInputResolver:
    """Turn a side-input descriptor into a singleton value or a collection.

    Every call to :meth:`resolve` makes a fresh, single pass over the
    descriptor's shards. Nothing is cached between calls and no state is
    shared, so independent calls may run concurrently as long as the reader
    supports concurrent opens of the same shard.
    """

    def __init__(
        self,
        reader: ShardReader,
        coder: Coder,
        config: ResolverConfig | None = None,
    ):
        self.reader = reader
        self.coder = coder
        self.config = config or ResolverConfig()

        self._projections: dict[SideInputKind, Callable[[Iterable[Any], str | None], Any]] = {
            SideInputKind.SINGLETON: self._project_singleton,
            SideInputKind.COLLECTION: self._project_collection,
        }

    @classmethod
    def from_config(cls, config: ResolverConfig) -> "SideInputResolver":
        """Build a resolver with the reader and coder named in ``config``."""
        reader = create_shard_reader(config.reader.backend, base_dir=config.reader.base_dir)
        coder = create_coder(config.coder, **config.coder_options)
        logger.info(
            f"Created resolver '{config.name}': reader={config.reader.backend}, coder={config.coder}"
        )
        return cls(reader, coder, config)

    def resolve(self, descriptor: SideInputDescriptor) -> Any:
        """Read the descriptor's shards and project them to its kind.

        Raises:
            UnknownKindError: the kind tag is not recognized. No shard is read.
            CardinalityError: a singleton did not hold exactly one element.
            ShardAccessError, DecodeError: reading a shard failed.
        """
        # Parse before building the sequence so unknown kinds never touch a shard
        kind = SideInputKind.parse(descriptor.kind)
        logger.debug(
            f"Resolving {kind.value} side input '{descriptor.tag}' "
            f"from {descriptor.num_shards} shards"
        )
        elements = ShardSequencer(self.reader, self.coder).sequence(descriptor.shards)
        return self._projections[kind](elements, descriptor.tag)

    def resolve_all(self, descriptors: Mapping[str, SideInputDescriptor]) -> dict[str, Any]:
        """Resolve several side inputs, keyed by name, one after another."""
        return {name: self.resolve(descriptor) for name, descriptor in descriptors.items()}

    def project(self, kind: SideInputKind | str, elements: Iterable[Any]) -> Any:
        """Project already-decoded elements to the value shape of ``kind``."""
        kind = SideInputKind.parse(kind)
        return self._projections[kind](elements, None)

    def _project_singleton(self, elements: Iterable[Any], tag: str | None) -> Any:
        iterator = iter(elements)
        try:
            # Stop at the second element rather than draining a mis-declared singleton
            first = next(iterator, _MISSING)
            if first is _MISSING:
                raise CardinalityError(0, tag)
            if next(iterator, _MISSING) is not _MISSING:
                raise CardinalityError(2, tag)
        finally:
            _close(iterator)
        return first

    def _project_collection(self, elements: Iterable[Any], tag: str | None) -> Any:
        if not self.config.materialize_collections:
            return elements
        try:
            values = list(elements)
        finally:
            _close(elements)
        logger.debug(f"Materialized collection side input '{tag}': {len(values)} elements")
        return values


def _close(elements: Iterable[Any]) -> None:
    """Release a partially consumed sequence, if it holds resources."""
    close = getattr(elements, "close", None)
    if close is not None:
        close()


def resolve_side_input(
    descriptor: SideInputDescriptor,
    reader: ShardReader,
    coder: Coder,
    config: ResolverConfig | None = None,
) -> Any:
    """Resolve a single side input without keeping a resolver around."""
    return SideInputResolver(reader, coder, config).resolve(descriptor)
