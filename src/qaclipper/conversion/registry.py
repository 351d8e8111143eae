"""
Rule registry keyed by (category, platform).

Each platform has at most one active rule per category. Categories a
platform does not override resolve to the default rule, so adding a new
platform only means registering the rules that differ.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Optional

from ..models.config import Platform
from .protocols import DISPATCH_ORDER, Rule, RuleCategory
from .rules import (
    CHATGPT_CODE_PROFILE,
    CLAUDE_CODE_PROFILE,
    GEMINI_CODE_PROFILE,
    GROK_CODE_PROFILE,
    BlockquoteRule,
    ChatGPTHeadingRule,
    ChatGPTTableRule,
    ClaudeTableRule,
    CodeBlockRule,
    GrokInlineRule,
    GrokTableRule,
    HeadingRule,
    StrikethroughRule,
    TableRule,
)

logger = logging.getLogger(__name__)


def _known_platform(platform: Any) -> Platform:
    if isinstance(platform, Platform):
        return platform
    try:
        return Platform(str(platform).strip().lower())
    except ValueError:
        known = ", ".join(p.value for p in Platform)
        raise ValueError(f"Unknown platform {platform!r} (expected one of: {known})") from None


class RuleRegistry:
    """
    Registry of conversion rules.

    Example:
        registry = RuleRegistry()
        registry.register_default(RuleCategory.TABLE, TableRule())
        registry.register_platform("claude", RuleCategory.TABLE, ClaudeTableRule())
        registry.resolve(RuleCategory.TABLE, "claude")  # ClaudeTableRule()
        registry.resolve(RuleCategory.TABLE, "mistral") # TableRule()
    """

    def __init__(self) -> None:
        self._rules: dict[tuple[RuleCategory, Platform], Rule] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> "RuleRegistry":
        """Make the registry read-only. Returns self for chaining."""
        self._frozen = True
        return self

    def _check_writable(self, category: Any, rule: Rule) -> RuleCategory:
        if self._frozen:
            raise RuntimeError("Rule registry is frozen; create a new registry to change rules")
        if not isinstance(rule, Rule):
            raise ValueError(f"{rule!r} does not implement the Rule protocol")
        category = RuleCategory(category)
        if RuleCategory(rule.category) is not category:
            raise ValueError(f"Cannot register {rule!r} (category {rule.category}) under category {category.value}")
        return category

    def register_default(self, category: Any, rule: Rule) -> None:
        """Register the rule used by every platform that does not override category."""
        self.register_platform(Platform.DEFAULT, category, rule)

    def register_platform(self, platform: Any, category: Any, rule: Rule) -> None:
        """
        Register a rule for one platform.

        Re-registering the same (platform, category) replaces the previous
        rule. Unlike resolve(), unknown platform names are rejected so that
        a typo never replaces the default rule of every platform.

        Raises:
            ValueError: If rule.category differs from category, or the
                platform name is unknown
            RuntimeError: If the registry is frozen
        """
        category = self._check_writable(category, rule)
        key = (category, _known_platform(platform))
        if key in self._rules:
            logger.debug(f"Replacing {category.value} rule for {key[1].value}: {self._rules[key]!r} -> {rule!r}")
        self._rules[key] = rule

    def resolve(self, category: Any, platform: Any = Platform.DEFAULT) -> Optional[Rule]:
        """
        Return the active rule for category on platform.

        Returns:
            The platform rule if registered, else the default rule, else None
        """
        category = RuleCategory(category)
        platform = Platform.coerce(platform)
        rule = self._rules.get((category, platform))
        if rule is None and platform is not Platform.DEFAULT:
            rule = self._rules.get((category, Platform.DEFAULT))
        return rule

    def active_rules(self, platform: Any = Platform.DEFAULT) -> list[Rule]:
        """Return the active rules for platform in dispatch order."""
        rules = []
        for category in DISPATCH_ORDER:
            rule = self.resolve(category, platform)
            if rule is not None:
                rules.append(rule)
        return rules

    def __len__(self) -> int:
        return len(self._rules)


def build_default_registry() -> RuleRegistry:
    """Create a registry holding the built-in rules and platform variants."""
    registry = RuleRegistry()

    registry.register_default(RuleCategory.CODE_BLOCK, CodeBlockRule())
    registry.register_default(RuleCategory.TABLE, TableRule())
    registry.register_default(RuleCategory.HEADING, HeadingRule())
    registry.register_default(RuleCategory.BLOCKQUOTE, BlockquoteRule())
    registry.register_default(RuleCategory.INLINE, StrikethroughRule())

    registry.register_platform(Platform.CLAUDE, RuleCategory.CODE_BLOCK, CodeBlockRule(CLAUDE_CODE_PROFILE))
    registry.register_platform(Platform.CLAUDE, RuleCategory.TABLE, ClaudeTableRule())

    registry.register_platform(Platform.CHATGPT, RuleCategory.CODE_BLOCK, CodeBlockRule(CHATGPT_CODE_PROFILE))
    registry.register_platform(Platform.CHATGPT, RuleCategory.TABLE, ChatGPTTableRule())
    registry.register_platform(Platform.CHATGPT, RuleCategory.HEADING, ChatGPTHeadingRule())

    registry.register_platform(Platform.GEMINI, RuleCategory.CODE_BLOCK, CodeBlockRule(GEMINI_CODE_PROFILE))

    registry.register_platform(Platform.GROK, RuleCategory.CODE_BLOCK, CodeBlockRule(GROK_CODE_PROFILE))
    registry.register_platform(Platform.GROK, RuleCategory.TABLE, GrokTableRule())
    registry.register_platform(Platform.GROK, RuleCategory.INLINE, GrokInlineRule())

    return registry


_default_registry: Optional[RuleRegistry] = None
_default_lock = threading.Lock()


def get_default_registry() -> RuleRegistry:
    """Return the process-wide registry, building it on first use."""
    global _default_registry
    with _default_lock:
        if _default_registry is None:
            _default_registry = build_default_registry()
        return _default_registry


def register_rule(category: Any, rule: Rule, platform: Any = None) -> None:
    """
    Add or replace a rule in the process-wide registry.

    Args:
        category: RuleCategory (or its value) the rule belongs to
        rule: Rule implementation
        platform: Platform name; None registers the default rule

    Raises:
        ValueError: If platform is not a known platform name
    """
    registry = get_default_registry()
    if platform is None:
        registry.register_default(category, rule)
    else:
        registry.register_platform(platform, category, rule)
