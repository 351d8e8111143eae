"""qaclipper configuration and content models."""

from .config import (
    ClipperConfig,
    ConversionOptions,
    FormatSettings,
    Platform,
)
from .items import (
    CodeBlockItem,
    ContentItem,
    Conversation,
    ConversationTurn,
    ImageItem,
    TextItem,
    items_to_markdown,
)

__all__ = [
    # Config
    "ClipperConfig",
    "ConversionOptions",
    "FormatSettings",
    "Platform",
    # Items
    "CodeBlockItem",
    "ContentItem",
    "Conversation",
    "ConversationTurn",
    "ImageItem",
    "TextItem",
    "items_to_markdown",
]
