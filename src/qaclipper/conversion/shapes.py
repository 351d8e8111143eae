"""
Shape detection for code blocks and tables.

Chat front-ends emit the same semantic element with different nesting
depending on their rendering internals. The functions here look at class
names, tag nesting and sibling structure and return a tagged shape
dataclass; rendering is left to the rules.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Union

from bs4 import NavigableString, Tag
from bs4.element import PreformattedString

logger = logging.getLogger(__name__)

# Elements that, found outside the <pre>, mean a <div> is a content
# wrapper rather than a code block container.
BLOCK_TAGS = frozenset(
    {
        "p",
        "ul",
        "ol",
        "li",
        "table",
        "blockquote",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "hr",
        "img",
    }
)

CODE_CANDIDATE_TAGS = frozenset({"pre", "code-block"})

DEFAULT_LANGUAGE = "text"

# Badges longer than this are prose, not a language label.
MAX_BADGE_LENGTH = 32

# Text allowed around the <pre> of a code container (badge + "Copy code").
MAX_DECORATION_LENGTH = 64


def child_tags(node: Tag) -> list[Tag]:
    """Return the element children of node, skipping text and comments."""
    return [child for child in node.children if isinstance(child, Tag)]


def has_class(node: Tag, class_name: str) -> bool:
    classes = node.get("class") or []
    return class_name in classes


def _is_within(node: Tag, ancestor: Tag) -> bool:
    return node is ancestor or any(parent is ancestor for parent in node.parents)


# ---------------------------------------------------------------------------
# Code blocks
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CodeShapeProfile:
    """
    Platform-tunable selectors used by code block detection.

    Attributes:
        payload_selectors: CSS selectors of explicit code payload wrappers
        badge_selectors: CSS selectors of language badge elements
        container_selectors: CSS selectors of platform code wrappers that
            hold a <code> element without any <pre>
    """

    payload_selectors: tuple[str, ...] = (".code-block__code", ".code-payload")
    badge_selectors: tuple[str, ...] = (
        ".code-language",
        ".language-label",
        ".code-lang",
        ".lang-badge",
    )
    container_selectors: tuple[str, ...] = ()


DEFAULT_CODE_PROFILE = CodeShapeProfile()


@dataclass(frozen=True)
class CodePayload:
    """Code found through an explicit payload wrapper class."""

    container: Tag
    element: Tag


@dataclass(frozen=True)
class DoublyNestedPre:
    """div > div > pre > code, the candidate being the outer div."""

    container: Tag
    element: Tag


@dataclass(frozen=True)
class NestedPre:
    """div > pre > code, the candidate being the div."""

    container: Tag
    element: Tag


@dataclass(frozen=True)
class WrappedPre:
    """div > pre (or div > div > pre) with no <code>; the <pre> holds the code."""

    container: Tag
    element: Tag


@dataclass(frozen=True)
class DirectCode:
    """A <code> element directly under the candidate (usually a <pre>)."""

    container: Tag
    element: Tag


@dataclass(frozen=True)
class RawText:
    """Fallback: the whole candidate is the code, with no known language."""

    container: Tag

    @property
    def element(self) -> Tag:
        return self.container


CodeShape = Union[CodePayload, DoublyNestedPre, NestedPre, WrappedPre, DirectCode, RawText]


def _select_payload(node: Tag, profile: CodeShapeProfile) -> Optional[Tag]:
    for selector in profile.payload_selectors:
        wrapper = node if node.css.match(selector) else node.select_one(selector)
        if wrapper is not None:
            code = wrapper if wrapper.name == "code" else wrapper.find("code")
            return code if isinstance(code, Tag) else wrapper
    return None


def _select_doubly_nested(node: Tag, profile: CodeShapeProfile) -> Optional[Tag]:
    if node.name != "div":
        return None
    return node.select_one(":scope > div > pre > code")


def _select_nested(node: Tag, profile: CodeShapeProfile) -> Optional[Tag]:
    if node.name != "div":
        return None
    return node.select_one(":scope > pre > code")


def _select_wrapped_pre(node: Tag, profile: CodeShapeProfile) -> Optional[Tag]:
    if node.name != "div":
        return None
    return node.select_one(":scope > pre, :scope > div > pre")


def _select_direct(node: Tag, profile: CodeShapeProfile) -> Optional[Tag]:
    return node.select_one(":scope > code")


# Evaluated top to bottom; the first selector that finds a code element wins.
CODE_SHAPE_STEPS: tuple[tuple[Callable[[Tag, CodeShapeProfile], Optional[Tag]], type], ...] = (
    (_select_payload, CodePayload),
    (_select_doubly_nested, DoublyNestedPre),
    (_select_nested, NestedPre),
    (_select_wrapped_pre, WrappedPre),
    (_select_direct, DirectCode),
)


def _decorations(node: Tag, code: Tag, profile: CodeShapeProfile) -> list[Tag]:
    """Badges and buttons inside node that sit beside the code."""
    found = node.find_all("button")
    for selector in profile.badge_selectors:
        found.extend(badge for badge in node.select(selector) if not _is_within(code, badge))
    return found


def _has_loose_text(node: Tag, code: Tag, profile: CodeShapeProfile) -> bool:
    """True if node holds text outside the code that no badge or button accounts for."""
    accounted = [code] + _decorations(node, code, profile)
    for string in node.find_all(string=True):
        if isinstance(string, PreformattedString) or not isinstance(string, NavigableString):
            continue
        if not string.strip():
            continue
        if not any(_is_within(string, element) for element in accounted):
            return True
    return False


def is_code_container(node: Tag, profile: CodeShapeProfile = DEFAULT_CODE_PROFILE) -> bool:
    """
    Decide whether a <div> is a code block wrapper.

    A wrapper holds exactly one <pre> no deeper than two levels. Text
    outside that <pre> must belong to a language badge known to the
    profile or to a <button> (copy button), and stay short. Any block-level
    content or loose prose makes it an ordinary div, so the prose is
    rendered and the inner <pre> becomes a code block on its own.

    Divs matching one of the profile's container selectors are wrappers
    whenever they hold a <code> element.
    """
    if node.name != "div":
        return False
    if any(node.css.match(selector) for selector in profile.container_selectors):
        return node.find("code") is not None
    pres = node.find_all("pre")
    if len(pres) != 1:
        return False
    pre = pres[0]
    if pre.parent is not node and (pre.parent is None or pre.parent.parent is not node):
        return False
    for descendant in node.find_all(True):
        if descendant.name in BLOCK_TAGS and not _is_within(descendant, pre):
            return False
    if _has_loose_text(node, pre, profile):
        return False
    outside_text = len(node.get_text(strip=True)) - len(pre.get_text(strip=True))
    return outside_text <= MAX_DECORATION_LENGTH


def is_code_candidate(node: Tag, profile: CodeShapeProfile = DEFAULT_CODE_PROFILE) -> bool:
    """Coarse selector: anything that may be a code block."""
    return node.name in CODE_CANDIDATE_TAGS or is_code_container(node, profile)


def classify_code_block(node: Tag, profile: CodeShapeProfile = DEFAULT_CODE_PROFILE) -> CodeShape:
    """
    Determine which known markup shape a code block candidate has.

    Args:
        node: Candidate matched by is_code_candidate()
        profile: Platform selectors for payload wrappers and badges

    Returns:
        One of the CodeShape variants; RawText if nothing more specific fits
    """
    for select, shape_cls in CODE_SHAPE_STEPS:
        element = select(node, profile)
        if element is not None:
            return shape_cls(container=node, element=element)
    logger.debug(f"No code shape matched <{node.name}>, using raw text")
    return RawText(container=node)


def _badge_text(shape: CodeShape, profile: CodeShapeProfile) -> Optional[str]:
    for selector in profile.badge_selectors:
        for badge in shape.container.select(selector):
            # The badge must sit next to the code, not wrap it
            if _is_within(shape.element, badge):
                continue
            text = badge.get_text(" ", strip=True)
            if text and len(text) <= MAX_BADGE_LENGTH:
                return text.lower()
    return None


def _class_language(element: Tag) -> Optional[str]:
    for class_name in element.get("class") or []:
        if class_name.startswith("language-") and len(class_name) > len("language-"):
            return class_name[len("language-") :].lower()
    return None


def resolve_language(shape: CodeShape, profile: CodeShapeProfile = DEFAULT_CODE_PROFILE) -> str:
    """
    Resolve the language of a classified code block.

    Priority: language badge text, then a language-* class on the code
    element, then "text". Raw text blocks always report "text".
    """
    if isinstance(shape, RawText):
        return DEFAULT_LANGUAGE
    return _badge_text(shape, profile) or _class_language(shape.element) or DEFAULT_LANGUAGE


def code_text(shape: CodeShape) -> str:
    """Return the verbatim code of a shape, without surrounding blank lines."""
    text = shape.element.get_text()
    return text.rstrip().lstrip("\n")


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

CELL_TAGS = frozenset({"th", "td"})
SECTION_TAGS = frozenset({"thead", "tbody", "tfoot"})


@dataclass(frozen=True)
class ExplicitHeaderTable:
    """Header taken from <thead> or from a leading all-<th> row."""

    header: list[Tag]
    rows: list[list[Tag]] = field(default_factory=list)
    skipped_rows: int = 0

    @property
    def column_count(self) -> int:
        return len(self.header)


@dataclass(frozen=True)
class PromotedHeaderTable:
    """Headerless table whose first row was promoted to header."""

    header: list[Tag]
    rows: list[list[Tag]] = field(default_factory=list)
    skipped_rows: int = 0

    @property
    def column_count(self) -> int:
        return len(self.header)


@dataclass(frozen=True)
class EmptyTable:
    """Table with no usable rows."""

    table: Tag


TableShape = Union[ExplicitHeaderTable, PromotedHeaderTable, EmptyTable]


def row_cells(row: Tag) -> list[Tag]:
    return [cell for cell in child_tags(row) if cell.name in CELL_TAGS]


def collect_rows(table: Tag) -> tuple[list[Tag], list[Tag]]:
    """Return (thead rows, other rows) belonging to this table only."""
    head_rows: list[Tag] = []
    body_rows: list[Tag] = []
    for child in child_tags(table):
        if child.name == "tr":
            body_rows.append(child)
        elif child.name in SECTION_TAGS:
            rows = [row for row in child_tags(child) if row.name == "tr"]
            if child.name == "thead":
                head_rows.extend(rows)
            else:
                body_rows.extend(rows)
    return head_rows, body_rows


def _filter_rows(rows: list[Tag], column_count: int) -> tuple[list[list[Tag]], int]:
    kept: list[list[Tag]] = []
    skipped = 0
    for row in rows:
        cells = row_cells(row)
        if len(cells) == column_count:
            kept.append(cells)
        else:
            skipped += 1
            logger.debug(f"Table row skipped: expected {column_count} cells, found {len(cells)}")
    return kept, skipped


def classify_table(table: Tag) -> TableShape:
    """
    Determine the header structure of a table.

    Rows of nested tables are never considered. Data rows whose cell count
    differs from the header column count are dropped here, so renderers
    only ever see rectangular data.
    """
    head_rows, body_rows = collect_rows(table)
    head_rows = [row for row in head_rows if row_cells(row)]

    if head_rows:
        header = row_cells(head_rows[0])
        rows, skipped = _filter_rows(head_rows[1:] + body_rows, len(header))
        return ExplicitHeaderTable(header=header, rows=rows, skipped_rows=skipped)

    non_empty = [row for row in body_rows if row_cells(row)]
    if not non_empty:
        return EmptyTable(table=table)

    first, rest = non_empty[0], non_empty[1:]
    header = row_cells(first)
    rows, skipped = _filter_rows(rest, len(header))
    if all(cell.name == "th" for cell in header):
        return ExplicitHeaderTable(header=header, rows=rows, skipped_rows=skipped)
    return PromotedHeaderTable(header=header, rows=rows, skipped_rows=skipped)
