"""Approximate token counting.

Counts are character heuristics (roughly four characters per token), not the
output of a real tokenizer. Only their positivity and ordering are meaningful.
"""
from __future__ import annotations

from typing import Iterable

from .models import Message

CHARS_PER_TOKEN = 4
# Structural characters charged per chat message on top of role and content.
MESSAGE_OVERHEAD_CHARS = 20
EMBEDDING_DISCOUNT = 0.8


def estimate_tokens_from_length(length: int) -> int:
    base = max(1, length // CHARS_PER_TOKEN)
    # Adds 0-2 tokens of jitter.
    return base + length % 3


def estimate_tokens(text: str) -> int:
    """Estimate tokens for completion and chat text."""
    return estimate_tokens_from_length(len(text))


def estimate_embedding_tokens(text: str) -> int:
    """Estimate tokens for embedding input, which tokenizes more compactly."""
    base = max(1, len(text) // CHARS_PER_TOKEN)
    words = len(text.split())
    return max(1, int((base + words) * EMBEDDING_DISCOUNT))


def estimate_message_tokens(messages: Iterable[Message]) -> int:
    total_chars = 0
    for message in messages:
        total_chars += len(message.content or "") + len(message.role) + MESSAGE_OVERHEAD_CHARS
    return estimate_tokens_from_length(total_chars)
