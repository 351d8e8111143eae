"""Per-platform page structure: where turns are and what they contain."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Optional
from urllib.parse import parse_qs, urlparse

from bs4 import Tag

from ..models.config import Platform

USER = "user"
ASSISTANT = "assistant"


@dataclass(frozen=True)
class PlatformProfile:
    """
    Selectors and callbacks describing one chat front-end.

    Attributes:
        platform: Platform the profile belongs to
        turn_selector: CSS selector of turn containers, in page order
        role_of: Returns "user", "assistant" or None for a turn container
        user_selector: Element holding the user's text (None = whole turn)
        assistant_selector: Element holding the answer (None = whole turn)
        user_image_selector: Images (or image links) attached by the user
        skip_element: Predicate pruning assistant UI chrome before conversion
        fallback_turn_selector: Tried when turn_selector finds nothing
    """

    platform: Platform
    turn_selector: str
    role_of: Callable[[Tag], Optional[str]]
    user_selector: Optional[str] = None
    assistant_selector: Optional[str] = None
    user_image_selector: Optional[str] = None
    skip_element: Optional[Callable[[Tag], bool]] = None
    fallback_turn_selector: Optional[str] = None


def _role_from_attribute(attribute: str) -> Callable[[Tag], Optional[str]]:
    def role_of(turn: Tag) -> Optional[str]:
        marked = turn if turn.has_attr(attribute) else turn.select_one(f"[{attribute}]")
        if marked is None:
            return None
        role = str(marked.get(attribute, "")).strip().lower()
        return role if role in (USER, ASSISTANT) else None

    return role_of


def image_source(node: Tag) -> Optional[str]:
    """
    Return the URL of an attached image element.

    Works for <img src>, for Google Lens links whose url parameter
    carries the image address, and for preview tiles that show the image
    as a CSS background.
    """
    if node.name == "img":
        src = (node.get("src") or "").strip()
    elif node.has_attr("style"):
        src = _background_image(node)
    else:
        href = (node.get("href") or "").strip()
        src = parse_qs(urlparse(href).query).get("url", [href])[0]
    if not src or src.startswith(("data:", "blob:")):
        return None
    return src


# --- Claude ---------------------------------------------------------------

CLAUDE_USER_MESSAGE = 'div[data-testid="user-message"]'
CLAUDE_ASSISTANT_MESSAGE = "div.font-claude-response, div.font-claude-message"

THINKING_BLOCK_CLASSES = frozenset({"border-0.5", "border-border-300", "rounded-lg", "font-ui"})


def _claude_role(turn: Tag) -> Optional[str]:
    if turn.select_one(CLAUDE_USER_MESSAGE) is not None:
        return USER
    if turn.select_one(CLAUDE_ASSISTANT_MESSAGE) is not None:
        return ASSISTANT
    return None


def is_claude_thinking_block(node: Tag) -> bool:
    """Claude's collapsible reasoning card, or the reasoning row of newer layouts."""
    classes = set(node.get("class") or [])
    if THINKING_BLOCK_CLASSES <= classes and node.select_one("button.group\\/row") is not None:
        return True
    return "row-start-1" in classes and node.select_one("button.group\\/status") is not None


# --- ChatGPT --------------------------------------------------------------


def is_chatgpt_file_citation(node: Tag) -> bool:
    return node.name == "span" and "text-token-text-secondary" in (node.get("class") or [])


# --- Gemini ---------------------------------------------------------------


def _gemini_role(turn: Tag) -> Optional[str]:
    if turn.name == "user-query":
        return USER
    if turn.name == "model-response":
        return ASSISTANT
    return None


# --- Grok -----------------------------------------------------------------

GROK_TURN = 'div.relative.group.flex.flex-col.justify-center[class*="items-"]'
GROK_ATTACHMENT_CHIP = "div.flex.flex-row.items-center.rounded-xl.bg-chip"

_BACKGROUND_URL_RE = re.compile(r"url\(\s*['\"]?([^'\")]+)['\"]?\s*\)")


def _background_image(node: Tag) -> str:
    match = _BACKGROUND_URL_RE.search(str(node.get("style", "")))
    if match is None:
        return ""
    src = match.group(1).strip()
    # Attachment tiles show a thumbnail; /content serves the full image
    if "assets.grok.com" in src and "/preview-image" in src:
        return src.replace("/preview-image", "/content")
    return src


def _grok_role(turn: Tag) -> Optional[str]:
    classes = turn.get("class") or []
    if "items-end" in classes:
        return USER
    if "items-start" in classes:
        return ASSISTANT
    return None


def is_grok_attachment_chip(node: Tag) -> bool:
    return node.name == "div" and node.css.match(GROK_ATTACHMENT_CHIP)


PROFILES: dict[Platform, PlatformProfile] = {
    Platform.CLAUDE: PlatformProfile(
        platform=Platform.CLAUDE,
        turn_selector="div[data-test-render-count]",
        role_of=_claude_role,
        user_selector=CLAUDE_USER_MESSAGE,
        assistant_selector=CLAUDE_ASSISTANT_MESSAGE,
        user_image_selector="div.group\\/thumbnail img[alt]",
        skip_element=is_claude_thinking_block,
    ),
    Platform.CHATGPT: PlatformProfile(
        platform=Platform.CHATGPT,
        turn_selector='article[data-testid^="conversation-turn-"]',
        fallback_turn_selector="div[data-message-author-role]",
        role_of=_role_from_attribute("data-message-author-role"),
        user_selector=".whitespace-pre-wrap",
        assistant_selector="div.markdown",
        user_image_selector="div.overflow-hidden.rounded-lg img[src]",
    ),
    Platform.GEMINI: PlatformProfile(
        platform=Platform.GEMINI,
        turn_selector="user-query, model-response",
        role_of=_gemini_role,
        user_selector=".query-text",
        assistant_selector="div.markdown",
        user_image_selector='user-query-file-preview a[href^="https://lens.google.com/uploadbyurl?url="]',
    ),
    Platform.GROK: PlatformProfile(
        platform=Platform.GROK,
        turn_selector=GROK_TURN,
        role_of=_grok_role,
        user_selector="div.message-bubble p.break-words",
        assistant_selector="div.message-bubble",
        user_image_selector=f'{GROK_ATTACHMENT_CHIP} div[style*="background-image"]',
        skip_element=is_grok_attachment_chip,
    ),
    Platform.DEFAULT: PlatformProfile(
        platform=Platform.DEFAULT,
        turn_selector="[data-role]",
        role_of=_role_from_attribute("data-role"),
        user_image_selector="img[src]",
    ),
}


def get_profile(platform: Platform) -> PlatformProfile:
    """Return the profile for platform (the default profile for unknown names)."""
    return PROFILES.get(Platform.coerce(platform), PROFILES[Platform.DEFAULT])
