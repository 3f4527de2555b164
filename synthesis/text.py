"""Canned text rendering, truncation and finish-reason policy."""
from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Sequence, Tuple

from .classifier import Category
from .models import CompletionLogprobs, FinishReason
from .tokens import CHARS_PER_TOKEN, estimate_tokens

DEFAULT_COMPLETION_MAX_TOKENS = 16


class Surface(str, Enum):
    """Which API the text is rendered for; each has its own pools."""

    COMPLETION = "completion"
    CHAT = "chat"


_COMPLETION_GENERAL = (
    " This is an interesting topic that deserves careful consideration and thoughtful analysis.",
    " There are several important factors to consider when approaching this subject matter.",
    " The key to understanding this lies in examining the underlying principles and their practical applications.",
    " This represents a fascinating area of study with many opportunities for further exploration.",
    " The complexity of this subject requires a multifaceted approach to fully appreciate its nuances.",
)

COMPLETION_RESPONSES: Mapping[Category, Tuple[str, ...]] = MappingProxyType(
    {
        Category.GREETING: (
            " Hello! How can I help you today?",
            " Hi there! Nice to meet you.",
            " Hello! I'm here to assist you.",
            " Hi! What would you like to know?",
            " Hello! Feel free to ask me anything.",
        ),
        Category.QUESTION: (
            " This is a complex topic that involves multiple interconnected concepts. Let me break it down into simpler parts for better understanding.",
            " The fundamental principle behind this is based on well-established scientific theories that have been validated through extensive research.",
            " To understand this properly, we need to consider the historical context and how various factors have influenced its development over time.",
            " This concept can be explained through a practical example that demonstrates its real-world applications and benefits.",
        ),
        Category.CODE: (
            "\n```rust\nfn example() {\n    println!(\"Hello, world!\");\n}\n```",
            "\n```python\ndef example():\n    print(\"Hello, world!\")\n    return True\n```",
            "\n```javascript\nfunction example() {\n    console.log(\"Hello, world!\");\n    return true;\n}\n```",
            "\n```java\npublic void example() {\n    System.out.println(\"Hello, world!\");\n}\n```",
        ),
        Category.MATH: (
            " Working through the numbers step by step gives a clear and verifiable result.",
            " The calculation follows directly once each quantity is written out explicitly.",
        ),
        Category.CREATIVE: (
            " Once upon a time, in a land far away, there lived a curious explorer who discovered amazing secrets hidden in ancient ruins.",
            " The story begins on a rainy Tuesday morning when everything seemed ordinary, but little did anyone know that extraordinary events were about to unfold.",
            " In the bustling city, among the towering skyscrapers and busy streets, a small coffee shop held the key to an incredible adventure.",
            " The old library contained more than just books - it held mysteries that had been waiting centuries to be uncovered by the right person.",
        ),
        Category.GENERAL: _COMPLETION_GENERAL,
        Category.ADVANCED: _COMPLETION_GENERAL,
        Category.DEFAULT: _COMPLETION_GENERAL,
    }
)

_CHAT_GENERAL = (
    "I'm here to help! Please feel free to ask me anything, and I'll do my best to provide you with accurate and helpful information.",
)

CHAT_RESPONSES: Mapping[Category, Tuple[str, ...]] = MappingProxyType(
    {
        Category.GREETING: (
            "Hello! How can I assist you today?",
            "Hi there! What can I help you with?",
            "Hey! I'm here to help. What do you need?",
            "Hello! I'm ready to assist you with any questions or tasks you have.",
        ),
        # Ordered to line up with QUESTION_WORDS; the last entry is the fallback.
        Category.QUESTION: (
            "That's an interesting question. Let me provide you with a comprehensive answer based on my knowledge.",
            "Here's how you can approach this: I'll break it down into clear, actionable steps.",
            "There are several reasons for this. Let me explain the key factors involved.",
            "I'd be happy to help answer your question. Let me provide you with detailed information.",
        ),
        Category.CODE: (
            "I can help you with programming! Here's a solution:\n\n```python\ndef example_function():\n    return \"Hello, World!\"\n```\n\nThis code demonstrates a basic function that returns a greeting.",
        ),
        Category.MATH: (
            "I can help with mathematical calculations. For example, if you're looking to solve an equation or perform calculations, I can guide you through the process step by step.",
        ),
        Category.CREATIVE: (
            "I'd be delighted to help with creative writing! Here's a short example:\n\nOnce upon a time, in a world where artificial intelligence and human creativity merged seamlessly, there lived a helpful assistant who loved to tell stories...",
        ),
        Category.ADVANCED: (
            "As an advanced AI model, I can provide detailed, nuanced responses to complex questions. I'll analyze your request from multiple angles and provide comprehensive insights.",
        ),
        Category.GENERAL: _CHAT_GENERAL,
        Category.DEFAULT: (
            "Hello! I'm an AI assistant. How can I help you today?",
        ),
    }
)

QUESTION_WORDS = ("what", "how", "why")

_POOLS = {Surface.COMPLETION: COMPLETION_RESPONSES, Surface.CHAT: CHAT_RESPONSES}


def stable_hash(text: str) -> int:
    """Sum of code points; unlike ``hash`` it is stable across processes."""
    return sum(ord(char) for char in text)


def _select(category: Category, text: str, surface: Surface) -> str:
    pool = _POOLS[surface].get(category) or _POOLS[surface][Category.GENERAL]
    if surface is Surface.CHAT and category is Category.QUESTION:
        lowered = text.lower()
        for index, word in enumerate(QUESTION_WORDS):
            if word in lowered:
                return pool[index]
        return pool[-1]
    return pool[stable_hash(text) % len(pool)]


def truncate_to_tokens(text: str, max_tokens: Optional[int]) -> str:
    """Cap ``text`` at roughly ``max_tokens`` tokens, preferring a word boundary."""
    if max_tokens is None:
        return text
    max_chars = max_tokens * CHARS_PER_TOKEN
    if len(text) <= max_chars:
        return text
    truncated = text[:max_chars]
    last_space = truncated.rfind(" ")
    if last_space > 0:
        return truncated[:last_space]
    return truncated


def render(
    category: Category,
    prompt: Optional[str],
    max_tokens: Optional[int],
    echo: bool = False,
    *,
    surface: Surface = Surface.COMPLETION,
) -> str:
    """Render canned text for ``category``.

    Selection depends only on the category and the prompt, so identical
    requests always receive identical text. ``echo`` prepends the prompt
    verbatim; the prefix is not subject to truncation.
    """
    prompt = prompt or ""
    body = truncate_to_tokens(_select(category, prompt, surface), max_tokens)
    if echo:
        return f"{prompt}{body}"
    return body


def finish_reason_for(
    text: str,
    max_tokens: Optional[int],
    stop: Sequence[str] = (),
) -> FinishReason:
    if any(sequence and sequence in text for sequence in stop):
        return FinishReason.STOP
    if max_tokens is not None and estimate_tokens(text) >= max_tokens:
        return FinishReason.LENGTH
    return FinishReason.STOP


def generate_logprobs(text: str, count: int) -> CompletionLogprobs:
    """Fake but structurally valid log probabilities for the first ``count`` words."""
    tokens = []
    token_logprobs = []
    top_logprobs = []
    text_offset = []
    offset = 0

    for word in text.split()[:count]:
        logprob = -0.1 - len(word) * 0.05
        alternatives = {word: logprob}
        if len(word) > 3:
            alternatives[f"{word}s"] = logprob - 0.5
            alternatives[f"un{word}"] = logprob - 1.0

        tokens.append(word)
        token_logprobs.append(logprob)
        top_logprobs.append(MappingProxyType(alternatives))
        text_offset.append(offset)
        offset += len(word) + 1

    return CompletionLogprobs(
        tokens=tuple(tokens),
        token_logprobs=tuple(token_logprobs),
        top_logprobs=tuple(top_logprobs),
        text_offset=tuple(text_offset),
    )
