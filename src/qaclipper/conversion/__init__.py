"""Content conversion for qaclipper (HTML to Markdown, content items, plain text)."""

from .accumulator import add_text_item, extract_items
from .engine import MarkdownRenderer, convert, normalize_markdown
from .plaintext import HtmlToPlainText
from .protocols import DISPATCH_ORDER, RenderContext, Rule, RuleCategory
from .registry import RuleRegistry, build_default_registry, get_default_registry, register_rule
from .rules import (
    BlockquoteRule,
    ChatGPTHeadingRule,
    ChatGPTTableRule,
    ClaudeTableRule,
    CodeBlockRule,
    GrokInlineRule,
    GrokTableRule,
    HeadingRule,
    StrikethroughRule,
    TableRule,
)

__all__ = [
    # Protocols
    "RenderContext",
    "Rule",
    "RuleCategory",
    "DISPATCH_ORDER",
    # Registry
    "RuleRegistry",
    "build_default_registry",
    "get_default_registry",
    "register_rule",
    # Rules
    "BlockquoteRule",
    "ChatGPTHeadingRule",
    "ChatGPTTableRule",
    "ClaudeTableRule",
    "CodeBlockRule",
    "GrokInlineRule",
    "GrokTableRule",
    "HeadingRule",
    "StrikethroughRule",
    "TableRule",
    # Engine
    "MarkdownRenderer",
    "convert",
    "normalize_markdown",
    "add_text_item",
    "extract_items",
    "HtmlToPlainText",
]
