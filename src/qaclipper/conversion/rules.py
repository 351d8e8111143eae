"""Built-in rule renderers and their platform variants."""

from __future__ import annotations

import copy
import logging
import re
from typing import Optional

from bs4 import Tag

from ..models.items import CodeBlockItem
from .protocols import RenderContext, RuleCategory
from .shapes import (
    DEFAULT_CODE_PROFILE,
    CodeShape,
    CodeShapeProfile,
    EmptyTable,
    PromotedHeaderTable,
    classify_code_block,
    classify_table,
    code_text,
    collect_rows,
    is_code_candidate,
    resolve_language,
    row_cells,
)

logger = logging.getLogger(__name__)

HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})


def _block(fragment: str) -> str:
    """Surround a block-level fragment with blank lines."""
    return f"\n\n{fragment}\n\n"


def _single_line(text: str) -> str:
    return re.sub(r"\s*\n+\s*", " ", text).strip()


class BaseRule:
    """Shared matching behaviour: a rule handles the tags it declares."""

    category: RuleCategory
    match_tags: frozenset[str] = frozenset()
    renders_children: bool = True

    def matches(self, node: Tag) -> bool:
        return node.name in self.match_tags

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class CodeBlockRule(BaseRule):
    """
    Renders code blocks as fenced Markdown.

    Example:
        rule = CodeBlockRule()
        rule.render(pre_tag, "", context)
        # '\\n\\n```python\\nprint(1)\\n```\\n\\n'
    """

    category = RuleCategory.CODE_BLOCK
    match_tags = frozenset({"pre", "code-block", "div"})
    renders_children = False

    def __init__(self, profile: CodeShapeProfile = DEFAULT_CODE_PROFILE):
        self.profile = profile

    def matches(self, node: Tag) -> bool:
        return is_code_candidate(node, self.profile)

    def classify(self, node: Tag) -> CodeShape:
        return classify_code_block(node, self.profile)

    def extract(self, node: Tag) -> Optional[CodeBlockItem]:
        """
        Extract a code block item from node.

        Returns:
            CodeBlockItem, or None when the code payload is empty
        """
        shape = self.classify(node)
        text = code_text(shape)
        if not text.strip():
            return None
        return CodeBlockItem(language=resolve_language(shape, self.profile), content=text)

    def render(self, node: Tag, content: str, context: RenderContext) -> str:
        item = self.extract(node)
        if item is None:
            return ""
        return _block(f"```{item.language}\n{item.content}\n```")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(profile={self.profile!r})"


class TableRule(BaseRule):
    """
    Renders tables as pipe-delimited Markdown.

    Cells are converted recursively (nested tables dropped), pipes are
    escaped and line breaks replaced so that each row stays on one line.
    """

    category = RuleCategory.TABLE
    match_tags = frozenset({"table"})
    renders_children = False

    cell_ignore_tags = frozenset({"table", "tr", "th", "td"})
    line_break = " "
    require_explicit_header = False

    def _cell(self, cell: Tag, context: RenderContext) -> str:
        options = context.options.derive(ignore_tags=context.options.ignore_tags | self.cell_ignore_tags)
        text = context.convert(cell, options).strip()
        text = text.replace("|", "\\|")
        return re.sub(r"[ \t]*\n+[ \t]*", self.line_break, text)

    @staticmethod
    def _row(cells: list[str]) -> str:
        return f"| {' | '.join(cells)} |"

    def _fallback(self, node: Tag) -> str:
        text = node.get_text(" ", strip=True)
        return _block(text) if text else ""

    def render(self, node: Tag, content: str, context: RenderContext) -> str:
        shape = classify_table(node)
        if isinstance(shape, EmptyTable):
            return ""
        if self.require_explicit_header and isinstance(shape, PromotedHeaderTable):
            logger.debug("Table has no explicit header, rendering its text")
            return self._fallback(node)

        lines = [
            self._row([self._cell(cell, context) for cell in shape.header]),
            "|" + "---|" * shape.column_count,
        ]
        for cells in shape.rows:
            lines.append(self._row([self._cell(cell, context) for cell in cells]))
        return _block("\n".join(lines))


class HeadingRule(BaseRule):
    """Maps h1-h6 to ATX headings."""

    category = RuleCategory.HEADING
    match_tags = HEADING_TAGS

    def _text(self, node: Tag, content: str) -> str:
        # Unusual nesting can leave the rendered content empty; fall back
        # to the raw text of the node.
        return _single_line(content) or _single_line(node.get_text())

    def render(self, node: Tag, content: str, context: RenderContext) -> str:
        text = self._text(node, content)
        if not text:
            return ""
        level = int(node.name[1])
        return _block(f"{'#' * level} {text}")


class BlockquoteRule(BaseRule):
    """Prefixes quoted lines with '> '."""

    category = RuleCategory.BLOCKQUOTE
    match_tags = frozenset({"blockquote"})

    def render(self, node: Tag, content: str, context: RenderContext) -> str:
        body = re.sub(r"\n{3,}", "\n\n", content.strip())
        if not body:
            return ""
        lines = []
        for line in body.split("\n"):
            if line.strip() and not line.startswith(">"):
                line = f"> {line}"
            lines.append(line)
        return _block("\n".join(lines))


class StrikethroughRule(BaseRule):
    """Wraps struck-out text in ~~ markers."""

    category = RuleCategory.INLINE
    match_tags = frozenset({"s", "del", "strike"})

    def render(self, node: Tag, content: str, context: RenderContext) -> str:
        text = content.strip()
        return f"~~{text}~~" if text else ""


# --- Platform variants -----------------------------------------------------

CLAUDE_CODE_PROFILE = CodeShapeProfile(
    payload_selectors=(".code-block__code", ".code-payload"),
    badge_selectors=(
        "div.text-text-500.font-small",
        "div.text-text-500.text-xs",
        "div.text-text-300.absolute",
    )
    + DEFAULT_CODE_PROFILE.badge_selectors,
)

CHATGPT_CODE_PROFILE = CodeShapeProfile(
    payload_selectors=(".code-block__code", ".code-payload", "div.overflow-y-auto"),
    badge_selectors=(
        "div.contain-inline-size > div:first-child",
        "div.flex.items-center:first-child",
    )
    + DEFAULT_CODE_PROFILE.badge_selectors,
)

GEMINI_CODE_PROFILE = CodeShapeProfile(
    payload_selectors=(".code-block__code", ".code-payload", "pre"),
    badge_selectors=("div.code-block-decoration > span",) + DEFAULT_CODE_PROFILE.badge_selectors,
)


class ClaudeTableRule(TableRule):
    """Claude tables keep in-cell line breaks as <br>."""

    line_break = "<br>"


class ChatGPTTableRule(TableRule):
    """ChatGPT always renders a <thead>; anything else is not a data table."""

    require_explicit_header = True


class ChatGPTHeadingRule(HeadingRule):
    """ChatGPT headings: inline code becomes backticks, other markup is flattened."""

    renders_children = False

    def _text(self, node: Tag, content: str) -> str:
        heading = copy.copy(node)
        for code in heading.find_all("code"):
            code.replace_with(f"`{code.get_text()}`")
        return _single_line(heading.get_text())


GROK_CODE_PROFILE = CodeShapeProfile(
    payload_selectors=('div[style*="display: block"] > code',) + DEFAULT_CODE_PROFILE.payload_selectors,
    badge_selectors=("div.flex > span.font-mono.text-xs",) + DEFAULT_CODE_PROFILE.badge_selectors,
    container_selectors=("div.not-prose",),
)

GROK_INLINE_CODE = "span.text-sm.px-1.rounded-sm.\\!font-mono"


class GrokTableRule(TableRule):
    """
    Grok tables keep every row.

    A headerless table gets a blank header row; short rows are padded with
    empty cells and long rows cut to the header width.
    """

    def render(self, node: Tag, content: str, context: RenderContext) -> str:
        head_rows, body_rows = collect_rows(node)
        head = [row_cells(row) for row in head_rows if row_cells(row)]
        body = [row_cells(row) for row in body_rows if row_cells(row)]
        if head:
            header = [self._cell(cell, context) for cell in head[0]]
            body = head[1:] + body
        elif body:
            header = [""] * len(body[0])
        else:
            return ""

        columns = len(header)
        lines = [self._row(header), "|" + "---|" * columns]
        for cells in body:
            rendered = [self._cell(cell, context) for cell in cells[:columns]]
            rendered.extend([""] * (columns - len(rendered)))
            lines.append(self._row(rendered))
        return _block("\n".join(lines))


class GrokInlineRule(StrikethroughRule):
    """Grok marks inline code with a styled <span> instead of <code>."""

    match_tags = StrikethroughRule.match_tags | {"span"}

    def matches(self, node: Tag) -> bool:
        if node.name == "span":
            return node.css.match(GROK_INLINE_CODE)
        return super().matches(node)

    def render(self, node: Tag, content: str, context: RenderContext) -> str:
        if node.name != "span":
            return super().render(node, content, context)
        text = node.get_text().strip()
        if not text:
            return ""
        return f"`` {text} ``" if "`" in text else f"`{text}`"
