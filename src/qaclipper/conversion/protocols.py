"""Protocol definitions for rule-based conversion."""

from enum import Enum
from typing import Protocol, runtime_checkable

from bs4 import Tag

from ..models.config import ConversionOptions, Platform


class RuleCategory(str, Enum):
    """Structural classes of content a rule can handle."""

    TABLE = "table"
    HEADING = "heading"
    CODE_BLOCK = "code_block"
    BLOCKQUOTE = "blockquote"
    INLINE = "inline"


# Order in which categories are tried against a node. Code blocks come first
# because a code container <div> may also wrap other matchable tags.
DISPATCH_ORDER = (
    RuleCategory.CODE_BLOCK,
    RuleCategory.TABLE,
    RuleCategory.HEADING,
    RuleCategory.BLOCKQUOTE,
    RuleCategory.INLINE,
)


class RenderContext(Protocol):
    """
    What a rule may ask of the engine while rendering.

    Rules never walk the tree themselves for nested Markdown; they call
    back into the engine so that platform rules and options stay in force.
    """

    @property
    def options(self) -> ConversionOptions: ...

    @property
    def platform(self) -> Platform: ...

    def convert(self, node: Tag, options: ConversionOptions) -> str:
        """
        Convert the children of node to Markdown with the given options.

        Args:
            node: Element whose children are converted
            options: Options for the nested conversion

        Returns:
            Markdown string (may be empty)
        """
        ...


@runtime_checkable
class Rule(Protocol):
    """
    Protocol for a pattern-matcher + renderer pair.

    Implementations declare their category and the tags they handle.
    render() must not raise; it returns "" for empty or unusable nodes.

    Example implementation:
        class UnderlineRule:
            category = RuleCategory.INLINE
            match_tags = frozenset({"u"})
            renders_children = True

            def matches(self, node: Tag) -> bool:
                return node.name in self.match_tags

            def render(self, node: Tag, content: str, context: RenderContext) -> str:
                return f"_{content.strip()}_" if content.strip() else ""
    """

    category: RuleCategory
    match_tags: frozenset[str]
    renders_children: bool

    def matches(self, node: Tag) -> bool:
        """Return True if this rule handles node."""
        ...

    def render(self, node: Tag, content: str, context: RenderContext) -> str:
        """
        Render node to a Markdown fragment.

        Args:
            node: The matched element
            content: Already rendered children ("" if renders_children is False)
            context: Engine callbacks and active options

        Returns:
            Markdown fragment
        """
        ...
