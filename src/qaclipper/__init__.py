"""
qaclipper - Convert chat conversations (Claude, ChatGPT, Gemini, Grok) to clean Markdown.

Usage:
    from qaclipper import ConversionOptions, Platform, convert, extract_conversation

    markdown = convert(html_fragment, ConversionOptions(platform=Platform.CLAUDE))

    conversation = extract_conversation(page_html)
    for turn in conversation.turns:
        print(turn.role, turn.content)
"""

__version__ = "1.0.0"

from .conversion import (
    HtmlToPlainText,
    RuleCategory,
    RuleRegistry,
    add_text_item,
    build_default_registry,
    convert,
    extract_items,
    get_default_registry,
    register_rule,
)
from .extraction import detect_platform, extract_conversation
from .formatters import TranscriptFormatter, get_formatter
from .models.config import ClipperConfig, ConversionOptions, FormatSettings, Platform
from .models.items import (
    CodeBlockItem,
    ContentItem,
    Conversation,
    ConversationTurn,
    ImageItem,
    TextItem,
)

__all__ = [
    "__version__",
    # Conversion
    "convert",
    "extract_items",
    "add_text_item",
    "HtmlToPlainText",
    # Rules
    "RuleCategory",
    "RuleRegistry",
    "build_default_registry",
    "get_default_registry",
    "register_rule",
    # Extraction
    "detect_platform",
    "extract_conversation",
    # Formatting
    "TranscriptFormatter",
    "get_formatter",
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
]
