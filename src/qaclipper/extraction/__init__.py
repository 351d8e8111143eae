"""Conversation extraction for qaclipper (platform detection, turns)."""

from .extractor import ConversationExtractor, detect_platform, extract_conversation, page_url, user_text
from .platforms import PROFILES, PlatformProfile, get_profile, image_source

__all__ = [
    "ConversationExtractor",
    "PlatformProfile",
    "PROFILES",
    "detect_platform",
    "extract_conversation",
    "get_profile",
    "image_source",
    "page_url",
    "user_text",
]
