"""Resolver configuration module."""

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Literal

import yaml


@dataclass
class ReaderConfig:
    """Shard reader configuration.

    Only file-backed readers can be configured. ``InMemoryShardReader`` holds
    shards added in code and is passed to ``SideInputResolver`` directly.
    """

    backend: Literal["local"] = "local"
    base_dir: str = "."

    def __post_init__(self):
        if self.backend != "local":
            raise ValueError(f"Unknown reader backend: {self.backend}. Available: ['local']")


@dataclass
class ResolverConfig:
    """Side-input resolver configuration."""

    name: str = "default-resolver"
    coder: str = "json"
    coder_options: dict[str, Any] = field(default_factory=dict)
    # Drain collection side inputs into a list so they can be iterated repeatedly
    materialize_collections: bool = False
    log_level: str = "INFO"

    reader: ReaderConfig = field(default_factory=ReaderConfig)

    def __post_init__(self):
        level = self.log_level.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log_level: {self.log_level}")
        self.log_level = level

    @classmethod
    def from_yaml(cls, path: str) -> "ResolverConfig":
        """Load configuration from YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ResolverConfig":
        """Create configuration from dictionary."""
        data = dict(data)

        resolver_data = data.pop("resolver", None)
        if resolver_data:
            data.update(resolver_data)

        reader_data = data.pop("reader", {}) or {}

        return cls(**data, reader=ReaderConfig(**reader_data))

    @classmethod
    def from_preset(cls, preset: str) -> "ResolverConfig":
        """Create configuration from preset."""
        presets = {
            "local": cls(name="local-resolver"),
            "debug": cls(
                name="debug-resolver",
                materialize_collections=True,
                log_level="DEBUG",
            ),
        }

        if preset not in presets:
            raise ValueError(f"Unknown preset: {preset}. Available: {list(presets.keys())}")

        return presets[preset]

    def to_yaml(self, path: str) -> None:
        """Save configuration to YAML file."""
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)
