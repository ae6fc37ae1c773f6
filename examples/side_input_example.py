"""
Example of resolving side inputs.

Writes a few record shards to a temporary directory, then resolves them as a
singleton and as a sharded collection the way a stage would before processing
its work item.
"""

import tempfile
from pathlib import Path

from sideinput_pipeline import CardinalityError, ResolverConfig, SideInputResolver
from sideinput_pipeline.coders import JsonCoder
from sideinput_pipeline.config import ReaderConfig
from sideinput_pipeline.sharding import write_record_shard
from sideinput_pipeline.sources import create_collection_descriptor, create_singleton_descriptor


def example_side_inputs(shard_dir: Path):
    """Resolve a singleton and a collection from local shards."""
    coder = JsonCoder()

    # 1. Upstream stage output: one threshold, a vocabulary split across shards
    print("=== Writing Shards ===")
    write_record_shard(str(shard_dir / "threshold-00000.rec"), [coder.encode(0.75)])
    write_record_shard(str(shard_dir / "vocab-00000.rec"), [coder.encode(w) for w in ["a", "b"]])
    write_record_shard(str(shard_dir / "vocab-00001.rec"), [])
    write_record_shard(str(shard_dir / "vocab-00002.rec"), [coder.encode("c")])

    # 2. Resolver for this worker
    config = ResolverConfig(name="example", coder="json", reader=ReaderConfig(base_dir=str(shard_dir)))
    resolver = SideInputResolver.from_config(config)

    # 3. Resolve
    print("\n=== Resolving ===")
    threshold = resolver.resolve(create_singleton_descriptor("threshold-00000.rec", tag="threshold"))
    print(f"threshold: {threshold}")

    vocab = resolver.resolve(
        create_collection_descriptor(
            "vocab-00000.rec", "vocab-00001.rec", "vocab-00002.rec", tag="vocab"
        )
    )
    print(f"vocab: {list(vocab)}")

    # 4. A collection mis-declared as a singleton is rejected
    print("\n=== Cardinality Check ===")
    try:
        resolver.resolve(create_singleton_descriptor("vocab-00000.rec", tag="vocab"))
    except CardinalityError as e:
        print(f"rejected: {e}")


if __name__ == "__main__":
    with tempfile.TemporaryDirectory() as tmp:
        example_side_inputs(Path(tmp))
