"""Content item and conversation types produced by extraction."""

from dataclasses import dataclass, field
from typing import Optional, Union

from .config import Platform


@dataclass
class TextItem:
    """A run of Markdown text. Consecutive runs are merged by add_text_item."""

    content: str
    type: str = field(default="text", init=False)  # noqa: A003


@dataclass
class CodeBlockItem:
    """A fenced code block kept apart from the surrounding text."""

    language: str
    content: str
    type: str = field(default="code_block", init=False)  # noqa: A003

    def to_markdown(self) -> str:
        return f"```{self.language}\n{self.content}\n```"


@dataclass
class ImageItem:
    """An image found in an assistant turn."""

    src: str
    alt: str = "Image"
    type: str = field(default="image", init=False)  # noqa: A003

    def to_markdown(self) -> str:
        return f"![{self.alt}]({self.src})"


ContentItem = Union[TextItem, CodeBlockItem, ImageItem]


def items_to_markdown(items: list[ContentItem]) -> str:
    """Join a list of content items back into one Markdown document."""
    parts = []
    for item in items:
        if isinstance(item, TextItem):
            parts.append(item.content)
        else:
            parts.append(item.to_markdown())
    return "\n\n".join(part for part in parts if part.strip())


@dataclass
class ConversationTurn:
    """
    One user or assistant turn of a conversation.

    Attributes:
        index: Position of the turn in the page
        role: "user", "assistant" or "unknown"
        text: Plain user text (user turns)
        items: Structured content (assistant turns)
        images: Image URLs attached to the turn
    """

    index: int
    role: str
    text: Optional[str] = None
    items: list[ContentItem] = field(default_factory=list)
    images: list[str] = field(default_factory=list)

    @property
    def content(self) -> str:
        """Markdown body of the turn, whichever field carries it."""
        if self.items:
            return items_to_markdown(self.items)
        return (self.text or "").strip()


@dataclass
class Conversation:
    """A whole extracted conversation."""

    platform: Platform
    turns: list[ConversationTurn] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.turns
