"""Transcript formatters for extracted conversations."""

from typing import Optional

from ..models.config import FormatSettings
from .base import BaseFormatter
from .transcript import PlainTranscriptFormatter, TranscriptFormatter, format_number, get_label

__all__ = [
    "BaseFormatter",
    "TranscriptFormatter",
    "PlainTranscriptFormatter",
    "format_number",
    "get_label",
    "get_formatter",
]


def get_formatter(format_name: str, settings: Optional[FormatSettings] = None) -> BaseFormatter:
    """Get formatter instance by name.

    Args:
        format_name: Format name ('markdown', 'text')
        settings: Transcript format settings

    Returns:
        Formatter instance

    Raises:
        ValueError: If format name is unknown
    """
    formatters = {
        "markdown": TranscriptFormatter,
        "text": PlainTranscriptFormatter,
    }

    formatter_class = formatters.get(format_name.lower())
    if not formatter_class:
        raise ValueError(f"Unknown format: {format_name}. Available formats: {', '.join(formatters.keys())}")

    return formatter_class(settings)
