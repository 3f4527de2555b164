"""Response identifiers and timestamps."""
from __future__ import annotations

import itertools
import time
import uuid

_call_counter = itertools.count(1)


def _hex(length: int) -> str:
    return uuid.uuid4().hex[:length]


def completion_id() -> str:
    return f"cmpl-{_hex(24)}"


def chat_completion_id() -> str:
    return f"chatcmpl-{_hex(29)}"


def tool_call_id() -> str:
    """Return ``call_`` plus 24 hex characters, unique within the process.

    The leading eight characters come from a process-wide counter so two calls
    never collide even if the random suffix does.
    """
    return f"call_{next(_call_counter) & 0xFFFFFFFF:08x}{_hex(16)}"


def unix_timestamp() -> int:
    return int(time.time())
