"""KaTeX math extraction."""

import re
from typing import Optional

from bs4 import Tag

INLINE_CLASSES = frozenset({"katex", "math-inline"})
DISPLAY_CLASSES = frozenset({"katex-display", "math-display"})

TEX_ANNOTATION = 'annotation[encoding="application/x-tex"]'

SUPERSCRIPTS = {
    "⁰": "0",
    "¹": "1",
    "²": "2",
    "³": "3",
    "⁴": "4",
    "⁵": "5",
    "⁶": "6",
    "⁷": "7",
    "⁸": "8",
    "⁹": "9",
}

SYMBOLS = {
    "α": r"\alpha",
    "β": r"\beta",
    "γ": r"\gamma",
    "±": r"\pm",
    "≠": r"\neq",
}

_SUPERSCRIPT_RE = re.compile(r"([a-zA-Z])([⁰¹²³⁴⁵⁶⁷⁸⁹])")
_FRACTION_RE = re.compile(r"(\w+)/(\w+)")
_SQRT_GROUP_RE = re.compile(r"√\(([^)]+)\)")
_SQRT_ATOM_RE = re.compile(r"√([a-zA-Z0-9]+)")


def math_kind(node: Tag) -> Optional[str]:
    """Return "display", "inline" or None for a <span>."""
    if node.name != "span":
        return None
    classes = set(node.get("class") or [])
    if classes & DISPLAY_CLASSES:
        return "display"
    if classes & INLINE_CLASSES:
        return "inline"
    return None


def reconstruct_latex(text: str) -> str:
    """
    Approximate LaTeX from the visible text KaTeX rendered.

    Only common patterns are rebuilt: superscript digits, a/b fractions,
    square roots and a handful of symbols.

    Examples:
        >>> reconstruct_latex("x² ± y")
        'x^{2} \\\\pm y'
    """
    latex = _SUPERSCRIPT_RE.sub(lambda m: f"{m.group(1)}^{{{SUPERSCRIPTS[m.group(2)]}}}", text)
    latex = _FRACTION_RE.sub(r"\\frac{\1}{\2}", latex)
    latex = _SQRT_GROUP_RE.sub(r"\\sqrt{\1}", latex)
    latex = _SQRT_ATOM_RE.sub(r"\\sqrt{\1}", latex)
    for symbol, command in SYMBOLS.items():
        latex = latex.replace(symbol, command)
    return latex


def extract_latex(node: Tag) -> Optional[str]:
    """
    Find the LaTeX source of a KaTeX element.

    The MathML annotation is preferred; the rendered .katex-html text is
    used to rebuild an approximation when the annotation is missing.
    """
    annotation = node.select_one(TEX_ANNOTATION)
    if annotation is not None:
        latex = annotation.get_text().strip()
        if latex:
            return latex
    rendered = node.select_one(".katex-html")
    if rendered is not None:
        text = rendered.get_text().strip()
        if text:
            return reconstruct_latex(text)
    return None
