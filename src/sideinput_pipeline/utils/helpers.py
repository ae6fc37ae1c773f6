"""Utility functions and helpers."""

import logging
import sys
from collections.abc import Iterable, Iterator
from itertools import islice
from typing import Any


def setup_logging(
    level: str = "INFO",
    format_str: str | None = None,
) -> logging.Logger:
    """Setup logging configuration."""
    if format_str is None:
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )

    return logging.getLogger("sideinput_pipeline")


def take(elements: Iterable[Any], limit: int | None) -> Iterator[Any]:
    """Yield at most ``limit`` elements, closing the source if stopped early."""
    if limit is None:
        yield from elements
        return
    try:
        yield from islice(elements, limit)
    finally:
        close = getattr(elements, "close", None)
        if close is not None:
            close()


def format_number(num: int) -> str:
    """Format number with commas."""
    return f"{num:,}"
