"""Error kinds raised while resolving side inputs."""

from typing import Any


class SideInputError(Exception):
    """Base class for every failure surfaced by side-input resolution."""


class ShardAccessError(SideInputError):
    """A shard could not be opened or failed while being read."""

    def __init__(self, shard: Any, index: int | None = None, cause: BaseException | None = None):
        self.shard = shard
        self.index = index
        self.cause = cause
        location = getattr(shard, "location", shard)
        where = f"shard {index} ({location})" if index is not None else f"shard {location}"
        super().__init__(f"Failed to read {where}: {cause}")


class DecodeError(SideInputError):
    """A raw record could not be decoded by the coder."""

    def __init__(self, shard: Any, position: int | None = None, cause: BaseException | None = None):
        self.shard = shard
        self.position = position
        self.cause = cause
        location = getattr(shard, "location", shard)
        at = f" at record {position}" if position is not None else ""
        super().__init__(f"Failed to decode record{at} of shard {location}: {cause}")


class CardinalityError(SideInputError):
    """A singleton side input did not contain exactly one element.

    ``found`` is 0 when the side input was empty and 2 when a second element
    was observed (reading stops there, so the real count may be larger).
    """

    def __init__(self, found: int, tag: str | None = None):
        self.found = found
        self.tag = tag
        name = f"'{tag}'" if tag else "side input"
        if found == 0:
            detail = "found none"
        else:
            detail = "found more than one"
        super().__init__(f"Singleton {name} expected exactly one element, {detail}")


class UnknownKindError(SideInputError):
    """A descriptor carries a kind tag that is not recognized."""

    def __init__(self, kind: Any, known: list[str] | None = None):
        self.kind = kind
        self.known = known or []
        super().__init__(f"Unknown side input kind: {kind!r}. Available: {self.known}")
