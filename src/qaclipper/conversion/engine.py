"""
HTML to Markdown conversion engine.

The engine walks a BeautifulSoup tree depth-first. At each element it asks
the registry for the active rules of the selected platform (code blocks,
tables, headings, blockquotes, inline marks) and falls back to built-in
handling for everything else. The caller's tree is never modified: pruning
happens on a deep copy.
"""

from __future__ import annotations

import copy
import logging
import re
from typing import Callable, Optional, Union

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PageElement, PreformattedString

from ..models.config import ConversionOptions, Platform
from .katex import extract_latex, math_kind
from .protocols import Rule
from .registry import RuleRegistry, get_default_registry
from .shapes import child_tags

logger = logging.getLogger(__name__)

# Dropped with their content regardless of options.
ALWAYS_DROPPED_TAGS = frozenset({"script", "style", "noscript", "template"})

# Elements rendered as their own block when no rule claims them.
BLOCK_CONTAINER_TAGS = frozenset(
    {
        "div",
        "section",
        "article",
        "main",
        "header",
        "footer",
        "aside",
        "nav",
        "figure",
        "figcaption",
        "details",
        "summary",
        "blockquote",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "dl",
        "dt",
        "dd",
    }
)

LIST_INDENT = "    "

_LINE_BREAKS_RE = re.compile(r"[ ]*[\n\r\t]+[ \t\n\r]*")
_LIST_LINE_RE = re.compile(r"^\s*(?:[-*+]|\d+\.)\s")

Root = Union[Tag, str]


def _is_fence(line: str) -> bool:
    return line.lstrip().startswith("```")


def normalize_markdown(markdown: str) -> str:
    """
    Clean up assembled Markdown.

    Outside fenced code, trailing whitespace is removed from each line and
    runs of blank lines collapse to one. Fenced code is left verbatim. The
    result is trimmed.
    """
    lines: list[str] = []
    in_fence = False
    for line in markdown.split("\n"):
        if _is_fence(line):
            in_fence = not in_fence
            lines.append(line.rstrip())
            continue
        if in_fence:
            lines.append(line)
            continue
        line = line.rstrip()
        if not line and lines and not lines[-1]:
            continue
        lines.append(line)
    return "\n".join(lines).strip()


def _tighten_list_item(body: str) -> str:
    """Drop blank lines in front of nested list lines so lists stay tight."""
    lines = body.split("\n")
    kept: list[str] = []
    in_fence = False
    for i, line in enumerate(lines):
        if _is_fence(line):
            in_fence = not in_fence
        elif not in_fence and not line.strip():
            following = next((rest for rest in lines[i + 1 :] if rest.strip()), "")
            if _LIST_LINE_RE.match(following):
                continue
        kept.append(line)
    return "\n".join(kept)


def _wrap(content: str, marker: str) -> str:
    """Wrap content in an emphasis marker, keeping outer spaces outside."""
    inner = content.strip()
    if not inner:
        return content
    lead = " " if content[0].isspace() else ""
    trail = " " if content[-1].isspace() else ""
    return f"{lead}{marker}{inner}{marker}{trail}"


def _is_renderable_text(node: PageElement) -> bool:
    # Comments, CDATA, doctypes and processing instructions are not content
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def _parse_int(value: object, default: int) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


def _predicate_matches(predicate: Callable[[Tag], bool], node: Tag) -> bool:
    try:
        return bool(predicate(node))
    except Exception as e:
        logger.warning(f"skip_element_check failed on <{node.name}>, keeping element: {e}")
        return False


def _prune(original: Tag, clone: Tag, predicate: Callable[[Tag], bool]) -> None:
    """
    Remove skipped subtrees from clone.

    The predicate is evaluated on the nodes of original so that it can
    inspect ancestors; the clone is walked in lockstep and never descended
    into below a removed node.
    """
    stack = [(original, clone)]
    while stack:
        source, target = stack.pop()
        for source_child, target_child in list(zip(source.contents, target.contents)):
            if not isinstance(source_child, Tag):
                continue
            if _predicate_matches(predicate, source_child):
                target_child.extract()
            else:
                stack.append((source_child, target_child))


def prepare_tree(root: Tag, options: ConversionOptions) -> Optional[Tag]:
    """
    Clone root and apply skip and ignore pruning to the clone.

    Returns:
        The pruned copy, or None when root itself is skipped
    """
    predicate = options.skip_element_check
    if predicate is not None and _predicate_matches(predicate, root):
        return None

    clone = copy.copy(root)
    if predicate is not None:
        _prune(root, clone, predicate)

    dropped = options.ignore_tags | ALWAYS_DROPPED_TAGS
    for tag in clone.find_all(lambda t: t.name in dropped):
        tag.extract()
    return clone


def parse_html(html: str) -> BeautifulSoup:
    """Parse an HTML string with the stdlib parser."""
    return BeautifulSoup(html, "html.parser")


class MarkdownRenderer:
    """
    Renders an already prepared tree to Markdown.

    Implements the RenderContext protocol handed to rules.
    """

    def __init__(self, options: ConversionOptions, registry: RuleRegistry):
        self._options = options
        self._registry = registry
        self._rules: list[Rule] = registry.active_rules(options.platform)

    @property
    def options(self) -> ConversionOptions:
        return self._options

    @property
    def platform(self) -> Platform:
        return self._options.platform

    @property
    def registry(self) -> RuleRegistry:
        return self._registry

    def convert(self, node: Tag, options: ConversionOptions) -> str:
        return convert(node, options, registry=self._registry)

    def rule_for(self, node: Tag) -> Optional[Rule]:
        """Return the first active rule (in dispatch order) matching node."""
        for rule in self._rules:
            if node.name in rule.match_tags and rule.matches(node):
                return rule
        return None

    def render(self, root: Tag) -> str:
        """Render the children of root and normalize the result."""
        return normalize_markdown(self.render_children(root))

    def render_children(self, node: Tag, raw: bool = False) -> str:
        parts: list[str] = []
        for child in node.children:
            piece = self.render_node(child, raw)
            if not piece:
                continue
            if not raw and isinstance(child, NavigableString) and parts and parts[-1].endswith((" ", "\n")):
                # Whitespace after a block, a line break or a checkbox marker
                piece = piece.lstrip(" ")
                if not piece:
                    continue
            parts.append(piece)
        return "".join(parts)

    def render_node(self, node: PageElement, raw: bool = False) -> str:
        if isinstance(node, Tag):
            return self._render_tag(node, raw)
        if _is_renderable_text(node):
            return self._render_text(str(node), raw)
        return ""

    @staticmethod
    def _render_text(text: str, raw: bool) -> str:
        if raw:
            return text
        text = text.replace("\xa0", " ")
        return _LINE_BREAKS_RE.sub(" ", text)

    def _render_tag(self, node: Tag, raw: bool) -> str:
        if raw:
            return self.render_children(node, raw=True)

        rule = self.rule_for(node)
        if rule is not None:
            content = self.render_children(node) if rule.renders_children else ""
            try:
                return rule.render(node, content, self)
            except Exception as e:
                logger.warning(f"{rule!r} failed on <{node.name}>, using built-in handling: {e}")

        return self._render_builtin(node)

    def _render_builtin(self, node: Tag) -> str:
        tag = node.name

        if tag in ("strong", "b"):
            return _wrap(self.render_children(node), "**")
        if tag in ("em", "i"):
            return _wrap(self.render_children(node), "*")
        if tag == "p":
            content = self.render_children(node).strip()
            return f"\n\n{content}\n\n" if content else ""
        if tag == "br":
            return "\n"
        if tag == "hr":
            return "\n\n---\n\n"
        if tag == "code":
            return self._render_inline_code(node)
        if tag == "pre":
            code = self.render_children(node, raw=True).rstrip().lstrip("\n")
            return f"\n\n```\n{code}\n```\n\n" if code.strip() else ""
        if tag == "a":
            return self._render_link(node)
        if tag == "img":
            return self._render_image(node)
        if tag in ("ul", "ol"):
            return self._render_list(node)
        if tag == "li":
            return self._render_list_item(node, "-")
        if tag == "input":
            return self._render_checkbox(node)
        if tag == "span" and math_kind(node) is not None:
            return self._render_math(node)
        if tag in BLOCK_CONTAINER_TAGS:
            content = self.render_children(node).strip()
            return f"\n\n{content}\n\n" if content else ""
        return self.render_children(node)

    def _render_inline_code(self, node: Tag) -> str:
        if node.find_parent("code-block") is not None:
            return node.get_text()
        text = node.get_text()
        if not text.strip():
            return ""
        fence = "``" if "`" in text else "`"
        padding = " " if fence == "``" else ""
        return f"{fence}{padding}{text}{padding}{fence}"

    def _render_link(self, node: Tag) -> str:
        content = self.render_children(node).strip()
        href = (node.get("href") or "").strip()
        if not content:
            return ""
        if not href or href.lower().startswith("javascript:"):
            return content
        return f"[{content}]({href})"

    @staticmethod
    def _render_image(node: Tag) -> str:
        src = (node.get("src") or "").strip()
        if not src or src.startswith(("data:", "blob:")):
            return ""
        alt = (node.get("alt") or "").strip() or "Image"
        return f"![{alt}]({src})"

    @staticmethod
    def _render_checkbox(node: Tag) -> str:
        if (node.get("type") or "").lower() != "checkbox":
            return ""
        return "[x] " if node.has_attr("checked") else "[ ] "

    def _render_math(self, node: Tag) -> str:
        latex = extract_latex(node)
        if latex is None:
            return self.render_children(node)
        if math_kind(node) == "display":
            return f"\n\n$${latex}$$\n\n"
        return f"${latex}$"

    def _render_list_item(self, item: Tag, marker: str) -> str:
        body = _tighten_list_item(self.render_children(item).strip())
        if not body:
            return ""
        first, *rest = body.split("\n")
        lines = [f"{marker} {first}"]
        lines.extend(LIST_INDENT + line if line.strip() else "" for line in rest)
        return "\n".join(lines)

    def _render_list(self, node: Tag) -> str:
        ordered = node.name == "ol"
        number = _parse_int(node.get("start"), 1)
        items: list[str] = []
        for child in child_tags(node):
            if child.name == "li":
                marker = f"{number}." if ordered else "-"
                number += 1
                rendered = self._render_list_item(child, marker)
            else:
                # e.g. a <ul> placed directly inside another list
                nested = self.render_node(child).strip()
                rendered = "\n".join(LIST_INDENT + line if line.strip() else "" for line in nested.split("\n"))
            if rendered.strip():
                items.append(rendered)
        if not items:
            return ""
        return "\n\n" + "\n".join(items) + "\n\n"


def convert(
    root: Root,
    options: Optional[ConversionOptions] = None,
    *,
    registry: Optional[RuleRegistry] = None,
) -> str:
    """
    Convert the children of an element to Markdown.

    Args:
        root: Element (or HTML string) whose children are converted
        options: Skip predicate, ignored tags and platform
        registry: Rule registry (defaults to the process-wide one)

    Returns:
        Markdown string, "" for empty or skipped input

    Example:
        >>> convert("<p>Hello <strong>world</strong></p>")
        'Hello **world**'
    """
    if isinstance(root, str):
        root = parse_html(root)
    if root is None or not isinstance(root, Tag) or not root.contents:
        return ""

    options = options or ConversionOptions()
    if registry is None:
        registry = get_default_registry()

    try:
        tree = prepare_tree(root, options)
        if tree is None:
            return ""
        return MarkdownRenderer(options, registry).render(tree)
    except RecursionError:
        logger.warning("Document nesting too deep for Markdown conversion, falling back to plain text")
        return normalize_markdown(root.get_text("\n"))
