"""Structured extraction: a turn as a list of content items."""

from __future__ import annotations

import logging
from typing import Optional

from bs4 import Tag

from ..models.config import ConversionOptions
from ..models.items import CodeBlockItem, ContentItem, ImageItem, TextItem
from .engine import MarkdownRenderer, Root, normalize_markdown, parse_html, prepare_tree
from .registry import RuleRegistry, get_default_registry

logger = logging.getLogger(__name__)

# Wrappers that are looked through when they hold code or images.
WRAPPER_TAGS = frozenset({"div", "section", "article", "main", "figure"})


def add_text_item(items: list[ContentItem], text: Optional[str]) -> None:
    """
    Append text to items, merging with a trailing text item.

    Blank text is ignored. When the last item is a TextItem the trimmed
    text is appended to it after a blank line, so two text items are never
    adjacent.

    Example:
        >>> items = [TextItem("a")]
        >>> add_text_item(items, "  b ")
        >>> items
        [TextItem(content='a\\n\\nb', type='text')]
    """
    trimmed = (text or "").strip()
    if not trimmed:
        return
    if items and isinstance(items[-1], TextItem):
        items[-1].content += f"\n\n{trimmed}"
    else:
        items.append(TextItem(content=trimmed))


def _standalone_image(node: Tag) -> Optional[Tag]:
    """Return the <img> if node is an image on its own (no surrounding text)."""
    if node.name == "img":
        return node
    images = node.find_all("img")
    if len(images) == 1 and not node.get_text(strip=True):
        return images[0]
    return None


class _ItemCollector:
    def __init__(self, renderer: MarkdownRenderer):
        self.renderer = renderer
        self.items: list[ContentItem] = []
        self._pending: list[str] = []

    def flush(self) -> None:
        add_text_item(self.items, normalize_markdown("".join(self._pending)))
        self._pending = []

    def add_code(self, node: Tag) -> bool:
        """Emit node as a code item if the active code rule claims it."""
        rule = self.renderer.rule_for(node)
        extract = getattr(rule, "extract", None)
        if extract is None:
            return False
        item = extract(node)
        self.flush()
        if item is None:
            logger.debug(f"Dropped empty code block <{node.name}>")
        elif isinstance(item, CodeBlockItem):
            self.items.append(item)
        return True

    def add_image(self, image: Tag) -> None:
        src = (image.get("src") or "").strip()
        if not src or src.startswith(("data:", "blob:")):
            logger.debug(f"Skipped image without usable source: {src[:40]!r}")
            return
        self.flush()
        self.items.append(ImageItem(src=src, alt=(image.get("alt") or "").strip() or "Image"))

    def walk(self, node: Tag) -> None:
        for child in node.children:
            if not isinstance(child, Tag):
                self._pending.append(self.renderer.render_node(child))
                continue
            if self.add_code(child):
                continue
            image = _standalone_image(child)
            if image is not None:
                self.add_image(image)
                continue
            if child.name in WRAPPER_TAGS and child.find(["pre", "code", "code-block", "img"]) is not None:
                self._pending.append("\n\n")
                self.walk(child)
                self._pending.append("\n\n")
                continue
            self._pending.append(self.renderer.render_node(child))


def extract_items(
    root: Root,
    options: Optional[ConversionOptions] = None,
    *,
    registry: Optional[RuleRegistry] = None,
) -> list[ContentItem]:
    """
    Split a turn into text, code block and image items.

    Code blocks and standalone images among the block children of root
    (looking through plain wrapper <div>s) become their own items; all other
    content is converted to Markdown and merged into text items.

    Args:
        root: Element (or HTML string) holding the turn content
        options: Conversion options
        registry: Rule registry (defaults to the process-wide one)

    Returns:
        List of content items; never two adjacent TextItems
    """
    if isinstance(root, str):
        root = parse_html(root)
    if root is None or not root.contents:
        return []

    options = options or ConversionOptions()
    if registry is None:
        registry = get_default_registry()

    try:
        tree = prepare_tree(root, options)
        if tree is None:
            return []
        collector = _ItemCollector(MarkdownRenderer(options, registry))
        collector.walk(tree)
        collector.flush()
        return collector.items
    except RecursionError:
        logger.warning("Document nesting too deep for item extraction, falling back to plain text")
        items: list[ContentItem] = []
        add_text_item(items, normalize_markdown(root.get_text("\n")))
        return items


__all__ = ["add_text_item", "extract_items"]
