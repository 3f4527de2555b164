"""Token usage aggregation."""
from __future__ import annotations

from typing import Iterable

from .models import UsageRecord


def aggregate(prompt_tokens: int, completion_tokens_per_choice: Iterable[int] = ()) -> UsageRecord:
    """Sum completion tokens over every returned choice."""
    return UsageRecord(
        prompt_tokens=prompt_tokens,
        completion_tokens=sum(completion_tokens_per_choice),
    )
