"""Conversation extraction from a saved chat page."""

from __future__ import annotations

import copy
import logging
import re
from typing import Optional, Union
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag

from ..conversion import HtmlToPlainText, extract_items, get_default_registry
from ..conversion.registry import RuleRegistry
from ..models.config import ConversionOptions, Platform
from ..models.items import Conversation, ConversationTurn
from .platforms import (
    ASSISTANT,
    GROK_TURN,
    USER,
    PlatformProfile,
    get_profile,
    image_source,
    is_chatgpt_file_citation,
)

logger = logging.getLogger(__name__)

HOST_PLATFORMS = (
    ("claude.ai", Platform.CLAUDE),
    ("chatgpt.com", Platform.CHATGPT),
    ("chat.openai.com", Platform.CHATGPT),
    ("gemini.google.com", Platform.GEMINI),
    ("grok.com", Platform.GROK),
)

CHATGPT_DOM_MARKERS = ('[data-testid^="conversation-turn-"]', "[data-message-author-role]")


def _host_matches(hostname: str, domain: str) -> bool:
    return hostname == domain or hostname.endswith(f".{domain}")


def detect_platform(url: Optional[str] = None, soup: Optional[Tag] = None) -> Platform:
    """
    Identify the chat platform of a page.

    The URL hostname decides first; without a recognizable URL the page is
    checked for the turn markers of each front-end.

    Args:
        url: Page URL, if known
        soup: Parsed page, if available

    Returns:
        Detected platform, Platform.DEFAULT when nothing matches
    """
    if url:
        hostname = (urlparse(url if "//" in url else f"//{url}").hostname or "").lower()
        for domain, platform in HOST_PLATFORMS:
            if _host_matches(hostname, domain):
                return platform

    if soup is not None:
        if any(soup.select_one(marker) is not None for marker in CHATGPT_DOM_MARKERS):
            return Platform.CHATGPT
        if soup.select_one("user-query, model-response") is not None:
            return Platform.GEMINI
        if soup.select_one("div[data-test-render-count]") is not None:
            return Platform.CLAUDE
        if soup.select_one(f"{GROK_TURN} div.message-bubble") is not None:
            return Platform.GROK

    logger.debug(f"Could not identify platform (url={url!r}), using default rules")
    return Platform.DEFAULT


def page_url(soup: Tag) -> Optional[str]:
    """Return the canonical or og:url address stored in a saved page, if any."""
    canonical = soup.select_one('link[rel="canonical"][href]')
    if canonical is not None:
        return str(canonical["href"])
    og_url = soup.select_one('meta[property="og:url"][content]')
    if og_url is not None:
        return str(og_url["content"])
    return None


def user_text(container: Tag) -> str:
    """Plain text of a user message, keeping its line breaks."""
    message = copy.copy(container)
    for br in message.find_all("br"):
        br.replace_with("\n")
    for block in message.find_all(["p", "div", "li"]):
        block.append("\n")
    text = message.get_text().replace("\xa0", " ")
    text = "\n".join(line.rstrip() for line in text.split("\n"))
    return re.sub(r"\n{3,}", "\n\n", text).strip()


class ConversationExtractor:
    """
    Extracts the turns of a conversation page.

    Example:
        extractor = ConversationExtractor(Platform.CHATGPT)
        conversation = extractor.extract(soup)
        for turn in conversation.turns:
            print(turn.role, turn.content)
    """

    def __init__(
        self,
        platform: Platform,
        options: Optional[ConversionOptions] = None,
        registry: Optional[RuleRegistry] = None,
        exclude_file_citations: bool = False,
        output_format: str = "markdown",
    ):
        self.platform = Platform.coerce(platform)
        self.profile: PlatformProfile = get_profile(self.platform)
        self.options = (options or ConversionOptions()).derive(platform=self.platform)
        self.registry = registry if registry is not None else get_default_registry()
        self.exclude_file_citations = exclude_file_citations
        self.output_format = output_format

    def _skip_check(self):
        checks = [check for check in (self.options.skip_element_check, self.profile.skip_element) if check]
        if self.exclude_file_citations and self.platform is Platform.CHATGPT:
            checks.append(is_chatgpt_file_citation)
        if not checks:
            return None
        if len(checks) == 1:
            return checks[0]
        return lambda node: any(check(node) for check in checks)

    def find_turns(self, soup: Tag) -> list[Tag]:
        turns = soup.select(self.profile.turn_selector)
        if not turns and self.profile.fallback_turn_selector:
            turns = soup.select(self.profile.fallback_turn_selector)
        return turns

    def _user_turn(self, index: int, turn: Tag) -> ConversationTurn:
        container = turn.select_one(self.profile.user_selector) if self.profile.user_selector else None
        text = user_text(container if container is not None else turn)

        images = []
        if self.profile.user_image_selector:
            for node in turn.select(self.profile.user_image_selector):
                src = image_source(node)
                if src and src not in images:
                    images.append(src)
        return ConversationTurn(index=index, role=USER, text=text, images=images)

    def _assistant_turn(self, index: int, turn: Tag) -> ConversationTurn:
        container = turn.select_one(self.profile.assistant_selector) if self.profile.assistant_selector else None
        if container is None:
            container = turn
        options = self.options.derive(skip_element_check=self._skip_check())
        if self.output_format == "text":
            text = HtmlToPlainText().convert(container, options).strip()
            return ConversationTurn(index=index, role=ASSISTANT, text=text)
        items = extract_items(container, options, registry=self.registry)
        return ConversationTurn(index=index, role=ASSISTANT, items=items)

    def extract(self, soup: Tag) -> Conversation:
        """
        Extract all turns found in soup.

        Turns whose role cannot be determined are kept with role "unknown"
        and no content. A turn that fails to extract is logged and skipped.
        """
        conversation = Conversation(platform=self.platform)
        turns = self.find_turns(soup)
        if not turns:
            logger.warning(f"No conversation turns found for {self.platform.value}")
            return conversation

        for index, turn in enumerate(turns):
            try:
                role = self.profile.role_of(turn)
                if role == USER:
                    conversation.turns.append(self._user_turn(index, turn))
                elif role == ASSISTANT:
                    conversation.turns.append(self._assistant_turn(index, turn))
                else:
                    logger.warning(f"Unknown role for turn {index}")
                    conversation.turns.append(ConversationTurn(index=index, role="unknown"))
            except Exception as e:
                logger.warning(f"Error processing turn {index}: {e}")
                continue

        logger.info(f"Extracted {len(conversation.turns)} turns ({self.platform.value})")
        return conversation


def extract_conversation(
    html_or_soup: Union[str, Tag],
    platform: Optional[Union[Platform, str]] = None,
    options: Optional[ConversionOptions] = None,
    *,
    url: Optional[str] = None,
    exclude_file_citations: bool = False,
    output_format: str = "markdown",
    registry: Optional[RuleRegistry] = None,
) -> Conversation:
    """
    Extract a conversation from a chat page.

    Args:
        html_or_soup: Page HTML or parsed page
        platform: Force a platform (None = detect)
        options: Base conversion options for assistant turns
        url: Page URL used for detection (defaults to the canonical link)
        exclude_file_citations: Drop ChatGPT file-citation pills
        output_format: "markdown" (content items) or "text" (plain text turns)
        registry: Rule registry (defaults to the process-wide one)

    Returns:
        Conversation with its turns in page order
    """
    soup = BeautifulSoup(html_or_soup, "html.parser") if isinstance(html_or_soup, str) else html_or_soup
    if platform is None:
        resolved = detect_platform(url or page_url(soup), soup)
    else:
        resolved = Platform.coerce(platform)

    extractor = ConversationExtractor(
        resolved,
        options=options,
        registry=registry,
        exclude_file_citations=exclude_file_citations,
        output_format=output_format,
    )
    return extractor.extract(soup)
