"""Tests for canned text rendering."""
from __future__ import annotations

from synthesis.classifier import Category
from synthesis.models import FinishReason
from synthesis.text import (
    CHAT_RESPONSES,
    COMPLETION_RESPONSES,
    Surface,
    finish_reason_for,
    generate_logprobs,
    render,
    stable_hash,
    truncate_to_tokens,
)


def test_every_category_has_a_pool_on_both_surfaces() -> None:
    for category in Category:
        if category is Category.TOOL_TRIGGER:
            continue
        assert COMPLETION_RESPONSES[category]
        assert CHAT_RESPONSES[category]


def test_render_is_deterministic_for_identical_prompts() -> None:
    first = render(Category.CREATIVE, "Write a story", 100)
    second = render(Category.CREATIVE, "Write a story", 100)
    assert first == second
    assert first in COMPLETION_RESPONSES[Category.CREATIVE]


def test_render_selects_by_prompt_hash() -> None:
    prompt = "Hello there"
    pool = COMPLETION_RESPONSES[Category.GREETING]
    expected = pool[stable_hash(prompt) % len(pool)]
    assert render(Category.GREETING, prompt, 50) == expected


def test_chat_questions_answer_by_question_word() -> None:
    pool = CHAT_RESPONSES[Category.QUESTION]
    assert render(Category.QUESTION, "What is Rust?", None, surface=Surface.CHAT) == pool[0]
    assert render(Category.QUESTION, "How do I start?", None, surface=Surface.CHAT) == pool[1]
    assert render(Category.QUESTION, "Why bother?", None, surface=Surface.CHAT) == pool[2]
    assert render(Category.QUESTION, "Is it good?", None, surface=Surface.CHAT) == pool[3]


def test_chat_default_greets() -> None:
    text = render(Category.DEFAULT, None, None, surface=Surface.CHAT)
    assert text == "Hello! I'm an AI assistant. How can I help you today?"


def test_truncate_prefers_word_boundary() -> None:
    text = "alpha beta gamma delta"
    # Two tokens allow eight characters: "alpha be" is cut back to "alpha".
    assert truncate_to_tokens(text, 2) == "alpha"
    assert truncate_to_tokens(text, 100) == text
    assert truncate_to_tokens(text, None) == text


def test_truncate_without_space_cuts_hard() -> None:
    assert truncate_to_tokens("abcdefghijklmnop", 2) == "abcdefgh"
    # A space at index 0 is not a usable boundary.
    assert truncate_to_tokens(" abcdefghijk", 1) == " abc"


def test_truncation_respects_max_tokens() -> None:
    for category in (Category.QUESTION, Category.CREATIVE, Category.CODE):
        text = render(category, "prompt", 5)
        assert len(text) <= 5 * 4


def test_echo_prefixes_prompt_verbatim() -> None:
    text = render(Category.GREETING, "Hello there", 50, echo=True)
    assert text.startswith("Hello there")
    assert text == "Hello there" + render(Category.GREETING, "Hello there", 50)


def test_finish_reason_policy() -> None:
    assert finish_reason_for("short", 100) is FinishReason.STOP
    assert finish_reason_for("a fairly long sentence of text", 2) is FinishReason.LENGTH
    assert finish_reason_for("a fairly long sentence of text", None) is FinishReason.STOP
    # A stop sequence present in the text wins over the length cap.
    assert finish_reason_for("a fairly long sentence of text", 2, ("long",)) is FinishReason.STOP


def test_generate_logprobs_structure() -> None:
    logprobs = generate_logprobs("The quick brown fox", 3)

    assert logprobs.tokens == ("The", "quick", "brown")
    assert logprobs.text_offset == (0, 4, 10)
    assert len(logprobs.token_logprobs) == 3
    assert all(value < 0 for value in logprobs.token_logprobs)
    assert dict(logprobs.top_logprobs[0]) == {"The": logprobs.token_logprobs[0]}
    assert set(logprobs.top_logprobs[1]) == {"quick", "quicks", "unquick"}

    payload = logprobs.to_dict()
    assert payload["tokens"] == ["The", "quick", "brown"]
    assert payload["top_logprobs"][1]["quick"] == logprobs.token_logprobs[1]
