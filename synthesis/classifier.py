"""Keyword classifier assigning user text to a response category."""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple

from .models import Message


class Category(str, Enum):
    TOOL_TRIGGER = "tool_trigger"
    GREETING = "greeting"
    QUESTION = "question"
    CODE = "code"
    MATH = "math"
    CREATIVE = "creative"
    ADVANCED = "advanced"
    GENERAL = "general"
    DEFAULT = "default"


@dataclass(frozen=True)
class KeywordRule:
    """Keywords that select ``category``.

    Keywords match at the start of a word (``calculate`` matches
    ``calculated``); ``whole_words`` rules only match complete words so that
    ``hi`` does not fire on ``this`` or ``history``. ``markers`` are plain
    substrings such as ``?``.
    """

    category: Category
    keywords: Tuple[str, ...]
    whole_words: bool = False
    markers: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        suffix = r"\b" if self.whole_words else ""
        alternatives = "|".join(re.escape(keyword) for keyword in self.keywords)
        object.__setattr__(self, "_pattern", re.compile(rf"\b(?:{alternatives}){suffix}"))

    def matches(self, lowered: str) -> bool:
        if any(marker in lowered for marker in self.markers):
            return True
        return self._pattern.search(lowered) is not None  # type: ignore[attr-defined]


TOOL_TRIGGER_RULE = KeywordRule(
    Category.TOOL_TRIGGER, ("weather", "search", "calculate", "time")
)

# Evaluated top to bottom after the tool trigger; first match wins.
CONTENT_RULES: Tuple[KeywordRule, ...] = (
    KeywordRule(Category.GREETING, ("hello", "hi", "hey"), whole_words=True),
    KeywordRule(Category.QUESTION, ("what", "how", "why", "explain"), markers=("?",)),
    KeywordRule(Category.CODE, ("code", "programming", "function")),
    KeywordRule(Category.MATH, ("calculate", "math", "number")),
    KeywordRule(Category.CREATIVE, ("story", "creative", "write", "create")),
)

ADVANCED_MODEL_MARKER = "gpt-4"


def has_tool_trigger(text: Optional[str]) -> bool:
    if not text:
        return False
    return TOOL_TRIGGER_RULE.matches(text.lower())


def classify(
    text: Optional[str],
    *,
    model: Optional[str] = None,
    chat: bool = False,
    tools_available: bool = False,
) -> Category:
    """Return the response category for ``text``.

    ``tools_available`` enables the tool-trigger test, which outranks every
    content rule. Unmatched chat text falls back to a model-tier bucket,
    unmatched completion text to the general bucket.
    """
    if text is None:
        return Category.DEFAULT

    lowered = text.lower()
    if tools_available and TOOL_TRIGGER_RULE.matches(lowered):
        return Category.TOOL_TRIGGER

    for rule in CONTENT_RULES:
        if rule.matches(lowered):
            return rule.category

    if chat and model and ADVANCED_MODEL_MARKER in model.lower():
        return Category.ADVANCED
    return Category.GENERAL


def latest_user_content(messages: Sequence[Message]) -> Optional[str]:
    """Content of the most recent user message, if any."""
    for message in reversed(messages):
        if message.role == "user":
            return message.content
    return None
