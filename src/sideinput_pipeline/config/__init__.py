"""Configuration module."""

from sideinput_pipeline.config.resolver_config import ReaderConfig, ResolverConfig

__all__ = [
    "ResolverConfig",
    "ReaderConfig",
]
