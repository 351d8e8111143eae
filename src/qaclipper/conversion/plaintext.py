"""HTML to plain text conversion."""

from __future__ import annotations

import logging
import re
from typing import Optional, Union

import html2text
from bs4 import Tag

from ..models.config import ConversionOptions
from .engine import parse_html, prepare_tree

logger = logging.getLogger(__name__)


class HtmlToPlainText:
    """
    Converts chat turn HTML to plain text.

    Uses html2text with emphasis, links and images switched off, so the
    result reads like the page without Markdown markers.

    Example:
        converter = HtmlToPlainText()
        text = converter.convert("<p>Hello <b>world</b></p>")  # "Hello world\\n"
    """

    def __init__(
        self,
        body_width: int = 0,
        ignore_emphasis: bool = True,
        ignore_links: bool = True,
        ignore_images: bool = True,
        ignore_tables: bool = False,
        unicode_snob: bool = True,
    ):
        """
        Initialize the plain text converter.

        Args:
            body_width: Max line width (0 = no wrapping)
            ignore_emphasis: Drop bold/italic markers
            ignore_links: Keep link text, drop targets
            ignore_images: Skip images
            ignore_tables: Flatten tables instead of drawing them
            unicode_snob: Use Unicode chars where possible
        """
        self.body_width = body_width
        self.ignore_emphasis = ignore_emphasis
        self.ignore_links = ignore_links
        self.ignore_images = ignore_images
        self.ignore_tables = ignore_tables
        self.unicode_snob = unicode_snob

    def _new_converter(self) -> html2text.HTML2Text:
        # HTML2Text keeps parser state between handle() calls
        converter = html2text.HTML2Text()

        # Line width (0 = no wrapping for consistent output)
        converter.body_width = self.body_width

        converter.ignore_emphasis = self.ignore_emphasis
        converter.ignore_links = self.ignore_links
        converter.ignore_images = self.ignore_images
        converter.ignore_tables = self.ignore_tables
        converter.unicode_snob = self.unicode_snob
        converter.escape_snob = False
        converter.single_line_break = False
        return converter

    def _clean_output(self, text: str) -> str:
        """Clean up the converted text."""
        # Remove excessive blank lines
        text = re.sub(r"\n{3,}", "\n\n", text)

        # Remove trailing whitespace on each line
        text = "\n".join(line.rstrip() for line in text.split("\n"))

        # Ensure single newline at end
        return text.strip() + "\n"

    def convert(self, html: Union[str, Tag], options: Optional[ConversionOptions] = None) -> str:
        """
        Convert HTML to plain text.

        Args:
            html: HTML string or element
            options: Skip predicate and ignored tags applied before conversion

        Returns:
            Plain text ("" for empty or skipped input)
        """
        root = parse_html(html) if isinstance(html, str) else html
        if root is None or not root.contents:
            return ""

        tree = prepare_tree(root, options or ConversionOptions())
        if tree is None:
            return ""
        markup = tree.decode_contents()
        if not markup.strip():
            return ""

        try:
            text = self._new_converter().handle(markup)
            text = self._clean_output(text)
            return "" if not text.strip() else text

        except Exception as e:
            logger.error(f"Failed to convert HTML to plain text: {e}")
            # Return raw text as fallback
            fallback: str = tree.get_text(separator="\n")
            return fallback.strip() + "\n" if fallback.strip() else ""
