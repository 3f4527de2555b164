"""Synthetic tool (function) invocations for chat completions."""
from __future__ import annotations

import json
from typing import Any, Mapping, Optional, Sequence, Tuple, Union

from .classifier import has_tool_trigger, latest_user_content
from .identifiers import tool_call_id
from .models import Message, ToolDeclaration, ToolInvocation

ToolChoice = Union[str, Mapping[str, Any], None]

# (name keyword, arguments) evaluated top to bottom; unmatched names get {}.
ARGUMENT_RULES: Tuple[Tuple[str, Mapping[str, Any]], ...] = (
    ("weather", {"location": "San Francisco, CA"}),
    ("search", {"query": "artificial intelligence"}),
    ("calculate", {"expression": "2 + 2"}),
    ("time", {"timezone": "UTC"}),
)


def function_arguments(function_name: str) -> str:
    """Return a JSON argument string plausible for ``function_name``."""
    lowered = function_name.lower()
    for keyword, arguments in ARGUMENT_RULES:
        if keyword in lowered:
            return json.dumps(dict(arguments))
    return "{}"


def should_invoke(
    messages: Sequence[Message],
    tools: Sequence[ToolDeclaration],
    tool_choice: ToolChoice,
) -> bool:
    """Decide whether the reply is a tool call rather than text.

    ``none`` never calls, ``required`` or a named function always calls, and
    ``auto`` calls when the latest user message mentions a tool trigger.
    """
    if not tools or tool_choice is None:
        return False
    if tool_choice == "none":
        return False
    if tool_choice == "required" or isinstance(tool_choice, Mapping):
        return True
    return has_tool_trigger(latest_user_content(messages))


def synthesize(tool: ToolDeclaration, call_id: Optional[str] = None) -> ToolInvocation:
    return ToolInvocation(
        id=call_id or tool_call_id(),
        name=tool.name,
        arguments=function_arguments(tool.name),
    )
