"""Request schemas validating JSON bodies before they reach the engine."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from synthesis.models import (
    ChatGenerationRequest,
    EmbeddingRequest,
    GenerationRequest,
    Message,
    ToolDeclaration,
    ToolInvocation,
)

from .errors import RequestValidationError

MAX_COMPLETION_TOKENS = 4096
MAX_CHOICES = 20
MAX_LOGPROBS = 5
MAX_STOP_SEQUENCES = 4
MAX_EMBEDDING_DIMENSIONS = 3072
CHAT_ROLES = ("system", "user", "assistant", "tool")
TOOL_CHOICE_MODES = ("none", "auto", "required")
ENCODING_FORMATS = ("float", "base64")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_token(value: Any) -> bool:
    return _is_int(value) and value >= 0


def _require_model(payload: Mapping[str, Any]) -> str:
    model = payload.get("model")
    if not isinstance(model, str) or not model.strip():
        raise RequestValidationError("Model cannot be empty", param="model")
    return model


def _optional_int(payload: Mapping[str, Any], key: str, low: int, high: Optional[int] = None) -> Optional[int]:
    value = payload.get(key)
    if value is None:
        return None
    if not _is_int(value):
        raise RequestValidationError(f"{key} must be an integer", param=key)
    if value < low or (high is not None and value > high):
        bounds = f"between {low} and {high}" if high is not None else f"at least {low}"
        raise RequestValidationError(f"{key} must be {bounds}", param=key)
    return value


def _optional_range(payload: Mapping[str, Any], key: str, low: float, high: float) -> Optional[float]:
    value = payload.get(key)
    if value is None:
        return None
    if not _is_number(value) or not low <= value <= high:
        raise RequestValidationError(f"{key} must be between {low} and {high}", param=key)
    return float(value)


def _reject_streaming(payload: Mapping[str, Any]) -> None:
    if payload.get("stream"):
        raise RequestValidationError("Streaming responses are not supported", param="stream")


def _sampling(payload: Mapping[str, Any]) -> Tuple[Optional[float], Optional[float]]:
    temperature = _optional_range(payload, "temperature", 0.0, 2.0)
    top_p = _optional_range(payload, "top_p", 0.0, 1.0)
    _optional_range(payload, "presence_penalty", -2.0, 2.0)
    _optional_range(payload, "frequency_penalty", -2.0, 2.0)
    return temperature, top_p


def _stop_sequences(payload: Mapping[str, Any]) -> Tuple[str, ...]:
    stop = payload.get("stop")
    if stop is None:
        return ()
    if isinstance(stop, str):
        return (stop,)
    if isinstance(stop, list) and all(isinstance(item, str) for item in stop):
        if len(stop) > MAX_STOP_SEQUENCES:
            raise RequestValidationError(
                f"stop cannot contain more than {MAX_STOP_SEQUENCES} sequences", param="stop"
            )
        return tuple(stop)
    raise RequestValidationError("stop must be a string or an array of strings", param="stop")


@dataclass
class CompletionRequestSchema:
    """Body of ``POST /v1/completions``."""

    model: str
    prompt: Union[str, List[str]]
    max_tokens: Optional[int] = None
    echo: bool = False
    stop: Tuple[str, ...] = ()
    n: int = 1
    logprobs: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None

    def __post_init__(self) -> None:
        if isinstance(self.prompt, str):
            if not self.prompt.strip():
                raise RequestValidationError("Prompt cannot be empty", param="prompt")
        elif isinstance(self.prompt, list) and all(isinstance(item, str) for item in self.prompt):
            if not self.prompt:
                raise RequestValidationError("Prompt array cannot be empty", param="prompt")
            if any(not item.strip() for item in self.prompt):
                raise RequestValidationError(
                    "Prompt array cannot contain empty strings", param="prompt"
                )
        else:
            raise RequestValidationError(
                "Prompt must be a string or an array of strings", param="prompt"
            )

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "CompletionRequestSchema":
        _reject_streaming(payload)
        model = _require_model(payload)
        temperature, top_p = _sampling(payload)
        echo = payload.get("echo", False)
        if not isinstance(echo, bool):
            raise RequestValidationError("echo must be a boolean", param="echo")
        n = _optional_int(payload, "n", 1, MAX_CHOICES)
        return cls(
            model=model,
            prompt=payload.get("prompt"),  # type: ignore[arg-type]
            max_tokens=_optional_int(payload, "max_tokens", 1, MAX_COMPLETION_TOKENS),
            echo=echo,
            stop=_stop_sequences(payload),
            n=1 if n is None else n,
            logprobs=_optional_int(payload, "logprobs", 0, MAX_LOGPROBS),
            temperature=temperature,
            top_p=top_p,
        )

    def to_request(self) -> GenerationRequest:
        prompt = self.prompt if isinstance(self.prompt, str) else tuple(self.prompt)
        return GenerationRequest(
            model=self.model,
            prompt=prompt,
            max_tokens=self.max_tokens,
            echo=self.echo,
            stop=self.stop,
            n=self.n,
            logprobs=self.logprobs,
            temperature=self.temperature,
            top_p=self.top_p,
        )


def _parse_tool_call(raw: Any, location: str) -> ToolInvocation:
    if not isinstance(raw, Mapping):
        raise RequestValidationError(f"{location} must be an object", param=location)
    function = raw.get("function")
    if not isinstance(function, Mapping) or not isinstance(function.get("name"), str):
        raise RequestValidationError(f"{location}.function.name is required", param=location)
    arguments = function.get("arguments", "{}")
    if not isinstance(arguments, str):
        raise RequestValidationError(
            f"{location}.function.arguments must be a JSON string", param=location
        )
    return ToolInvocation(
        id=str(raw.get("id", "")),
        name=function["name"],
        arguments=arguments,
        type=str(raw.get("type", "function")),
    )


def _parse_message(raw: Any, index: int) -> Message:
    location = f"messages[{index}]"
    if not isinstance(raw, Mapping):
        raise RequestValidationError(f"Invalid message at index {index}: must be an object", param=location)
    role = raw.get("role")
    if role not in CHAT_ROLES:
        raise RequestValidationError(
            f"Invalid message at index {index}: role must be one of {', '.join(CHAT_ROLES)}",
            param=location,
        )
    content = raw.get("content")
    if content is not None and not isinstance(content, str):
        raise RequestValidationError(
            f"Invalid message at index {index}: content must be a string", param=location
        )
    raw_calls = raw.get("tool_calls") or []
    if not isinstance(raw_calls, list):
        raise RequestValidationError(
            f"Invalid message at index {index}: tool_calls must be an array", param=location
        )
    tool_calls = tuple(
        _parse_tool_call(call, f"{location}.tool_calls[{call_index}]")
        for call_index, call in enumerate(raw_calls)
    )
    has_content = bool(content and content.strip())

    if role in ("system", "user") and not has_content:
        raise RequestValidationError(
            f"Invalid message at index {index}: Content cannot be empty for system and user messages",
            param=location,
        )
    if role == "assistant" and content is None and not tool_calls:
        raise RequestValidationError(
            f"Invalid message at index {index}: Assistant messages must have either content or tool_calls",
            param=location,
        )
    if role == "tool":
        if not has_content:
            raise RequestValidationError(
                f"Invalid message at index {index}: Tool messages must have content", param=location
            )
        if not raw.get("tool_call_id"):
            raise RequestValidationError(
                f"Invalid message at index {index}: Tool messages must have tool_call_id",
                param=location,
            )

    return Message(
        role=role,
        content=content,
        name=raw.get("name"),
        tool_calls=tool_calls,
        tool_call_id=raw.get("tool_call_id"),
    )


def _parse_tool(raw: Any, index: int) -> ToolDeclaration:
    location = f"tools[{index}]"
    if not isinstance(raw, Mapping) or raw.get("type", "function") != "function":
        raise RequestValidationError(f"{location} must be a function tool", param=location)
    function = raw.get("function")
    if not isinstance(function, Mapping):
        raise RequestValidationError(f"{location}.function is required", param=location)
    name = function.get("name")
    if not isinstance(name, str) or not name.strip():
        raise RequestValidationError(f"{location}.function.name is required", param=location)
    parameters = function.get("parameters") or {}
    if not isinstance(parameters, Mapping):
        raise RequestValidationError(
            f"{location}.function.parameters must be an object", param=location
        )
    return ToolDeclaration(
        name=name,
        description=function.get("description"),
        parameters=dict(parameters),
    )


def _parse_tool_choice(raw: Any, tools: Tuple[ToolDeclaration, ...]) -> Union[str, Dict[str, Any], None]:
    if raw is None:
        return None
    if isinstance(raw, str):
        if raw not in TOOL_CHOICE_MODES:
            raise RequestValidationError(
                f"tool_choice must be one of {', '.join(TOOL_CHOICE_MODES)} or a named function",
                param="tool_choice",
            )
        return raw
    if isinstance(raw, Mapping):
        function = raw.get("function")
        if raw.get("type") != "function" or not isinstance(function, Mapping) or not function.get("name"):
            raise RequestValidationError(
                "tool_choice must name a function as {'type': 'function', 'function': {'name': ...}}",
                param="tool_choice",
            )
        if function["name"] not in {tool.name for tool in tools}:
            raise RequestValidationError(
                f"tool_choice names unknown function '{function['name']}'", param="tool_choice"
            )
        return {"type": "function", "function": {"name": function["name"]}}
    raise RequestValidationError("tool_choice must be a string or an object", param="tool_choice")


@dataclass
class ChatCompletionRequestSchema:
    """Body of ``POST /v1/chat/completions``."""

    model: str
    messages: Tuple[Message, ...]
    n: int = 1
    max_tokens: Optional[int] = None
    stop: Tuple[str, ...] = ()
    tools: Tuple[ToolDeclaration, ...] = ()
    tool_choice: Union[str, Dict[str, Any], None] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None

    def __post_init__(self) -> None:
        if not self.messages:
            raise RequestValidationError("Messages array cannot be empty", param="messages")
        if self.tool_choice is not None and not self.tools:
            raise RequestValidationError(
                "tool_choice is only allowed when tools are specified", param="tool_choice"
            )

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ChatCompletionRequestSchema":
        _reject_streaming(payload)
        model = _require_model(payload)
        raw_messages = payload.get("messages")
        if not isinstance(raw_messages, list):
            raise RequestValidationError("messages must be an array", param="messages")
        temperature, top_p = _sampling(payload)
        raw_tools = payload.get("tools") or []
        if not isinstance(raw_tools, list):
            raise RequestValidationError("tools must be an array", param="tools")
        tools = tuple(_parse_tool(tool, index) for index, tool in enumerate(raw_tools))
        n = _optional_int(payload, "n", 1, MAX_CHOICES)
        return cls(
            model=model,
            messages=tuple(_parse_message(message, index) for index, message in enumerate(raw_messages)),
            n=1 if n is None else n,
            max_tokens=_optional_int(payload, "max_tokens", 1),
            stop=_stop_sequences(payload),
            tools=tools,
            tool_choice=_parse_tool_choice(payload.get("tool_choice"), tools),
            temperature=temperature,
            top_p=top_p,
        )

    def to_request(self) -> ChatGenerationRequest:
        return ChatGenerationRequest(
            model=self.model,
            messages=self.messages,
            n=self.n,
            max_tokens=self.max_tokens,
            stop=self.stop,
            tools=self.tools,
            tool_choice=self.tool_choice,
            temperature=self.temperature,
            top_p=self.top_p,
        )


@dataclass
class EmbeddingRequestSchema:
    """Body of ``POST /v1/embeddings``."""

    model: str
    input: Any
    dimensions: Optional[int] = None
    encoding_format: str = "float"

    def __post_init__(self) -> None:
        value = self.input
        if isinstance(value, str):
            if not value.strip():
                raise RequestValidationError("Input cannot be empty", param="input")
            return
        if not isinstance(value, list):
            raise RequestValidationError(
                "Input must be a string, an array of strings, or arrays of non-negative token ids",
                param="input",
            )
        if not value:
            raise RequestValidationError("Input array cannot be empty", param="input")
        if all(isinstance(item, str) for item in value):
            if any(not item.strip() for item in value):
                raise RequestValidationError("Input array cannot contain empty strings", param="input")
        elif all(_is_token(item) for item in value):
            return
        elif all(isinstance(item, list) and all(_is_token(token) for token in item) for item in value):
            if any(not item for item in value):
                raise RequestValidationError("Input array cannot contain empty arrays", param="input")
        else:
            raise RequestValidationError(
                "Input must be a string, an array of strings, or arrays of non-negative token ids",
                param="input",
            )

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "EmbeddingRequestSchema":
        model = _require_model(payload)
        encoding_format = payload.get("encoding_format") or "float"
        if encoding_format not in ENCODING_FORMATS:
            raise RequestValidationError(
                "encoding_format must be 'float' or 'base64'", param="encoding_format"
            )
        return cls(
            model=model,
            input=payload.get("input"),
            dimensions=_optional_int(payload, "dimensions", 1, MAX_EMBEDDING_DIMENSIONS),
            encoding_format=encoding_format,
        )

    def to_request(self) -> EmbeddingRequest:
        value = self.input
        if isinstance(value, list):
            value = tuple(tuple(item) if isinstance(item, list) else item for item in value)
        return EmbeddingRequest(
            model=self.model,
            input=value,
            dimensions=self.dimensions,
            encoding_format=self.encoding_format,
        )
