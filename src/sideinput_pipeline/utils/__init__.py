"""Utils module."""

from sideinput_pipeline.utils.helpers import (
    format_number,
    setup_logging,
    take,
)

__all__ = [
    "setup_logging",
    "format_number",
    "take",
]
