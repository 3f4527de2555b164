"""Data models for the synthesis engine."""
from __future__ import annotations

import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np


class FinishReason(str, Enum):
    """Why generation of a choice stopped."""

    STOP = "stop"
    LENGTH = "length"
    TOOL_CALLS = "tool_calls"


class ResponseKind(str, Enum):
    """Wire-level ``object`` literal of each envelope."""

    TEXT_COMPLETION = "text_completion"
    CHAT_COMPLETION = "chat.completion"
    LIST = "list"


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ToolInvocation:
    """A synthesized (or replayed) function call."""

    id: str
    name: str
    arguments: str = "{}"
    type: str = "function"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "function": {"name": self.name, "arguments": self.arguments},
        }


@dataclass(frozen=True)
class ToolDeclaration:
    """A function the caller allows the model to invoke."""

    name: str
    description: Optional[str] = None
    parameters: Mapping[str, Any] = field(default_factory=dict)
    type: str = "function"


@dataclass(frozen=True)
class Message:
    """Represents a single message within a chat-style interaction."""

    role: str
    content: Optional[str] = None
    name: Optional[str] = None
    tool_calls: Tuple[ToolInvocation, ...] = ()
    tool_call_id: Optional[str] = None


@dataclass(frozen=True)
class GenerationRequest:
    """Parameters for a single text completion request."""

    model: str
    prompt: Union[str, Tuple[str, ...]]
    max_tokens: Optional[int] = None
    echo: bool = False
    stop: Tuple[str, ...] = ()
    n: int = 1
    logprobs: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None

    @property
    def prompts(self) -> Tuple[str, ...]:
        if isinstance(self.prompt, str):
            return (self.prompt,)
        return tuple(self.prompt)


@dataclass(frozen=True)
class ChatGenerationRequest:
    """Parameters for multi-message chat generations."""

    model: str
    messages: Tuple[Message, ...]
    n: int = 1
    max_tokens: Optional[int] = None
    stop: Tuple[str, ...] = ()
    tools: Tuple[ToolDeclaration, ...] = ()
    tool_choice: Union[str, Mapping[str, Any], None] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None


EmbeddingInput = Union[str, Sequence[str], Sequence[int], Sequence[Sequence[int]]]


@dataclass(frozen=True)
class EmbeddingRequest:
    """Parameters for generating vector embeddings."""

    model: str
    input: EmbeddingInput
    dimensions: Optional[int] = None
    encoding_format: str = "float"


SynthesisRequest = Union[GenerationRequest, ChatGenerationRequest, EmbeddingRequest]


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class UsageRecord:
    """Token accounting for one response; ``total_tokens`` is always derived."""

    prompt_tokens: int
    completion_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens

    def to_dict(self) -> Dict[str, int]:
        return {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
        }


@dataclass(frozen=True)
class CompletionLogprobs:
    """Synthetic per-token log-probability annotations."""

    tokens: Tuple[str, ...]
    token_logprobs: Tuple[float, ...]
    top_logprobs: Tuple[Mapping[str, float], ...]
    text_offset: Tuple[int, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tokens": list(self.tokens),
            "token_logprobs": list(self.token_logprobs),
            "top_logprobs": [dict(item) for item in self.top_logprobs],
            "text_offset": list(self.text_offset),
        }


@dataclass(frozen=True)
class ResponseChoice:
    """One generated output unit: free text XOR tool invocations."""

    index: int
    finish_reason: FinishReason
    text: Optional[str] = None
    tool_calls: Tuple[ToolInvocation, ...] = ()
    logprobs: Optional[CompletionLogprobs] = None

    def __post_init__(self) -> None:
        if (self.text is None) == (not self.tool_calls):
            raise ValueError("A choice carries either text or tool calls, not both or neither")
        if self.tool_calls and self.finish_reason is not FinishReason.TOOL_CALLS:
            raise ValueError("Choices with tool calls must finish with 'tool_calls'")

    def to_completion_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "index": self.index,
            "logprobs": self.logprobs.to_dict() if self.logprobs else None,
            "finish_reason": self.finish_reason.value,
        }

    def to_chat_dict(self) -> Dict[str, Any]:
        message: Dict[str, Any] = {"role": "assistant", "content": self.text}
        if self.tool_calls:
            message["tool_calls"] = [call.to_dict() for call in self.tool_calls]
        return {
            "index": self.index,
            "message": message,
            "finish_reason": self.finish_reason.value,
        }


@dataclass(frozen=True)
class GenerationResponse:
    """Envelope returned for completion and chat completion requests."""

    id: str
    object: ResponseKind
    created: int
    model: str
    choices: Tuple[ResponseChoice, ...]
    usage: UsageRecord

    def to_dict(self) -> Dict[str, Any]:
        if self.object is ResponseKind.CHAT_COMPLETION:
            choices = [choice.to_chat_dict() for choice in self.choices]
        else:
            choices = [choice.to_completion_dict() for choice in self.choices]
        return {
            "id": self.id,
            "object": self.object.value,
            "created": self.created,
            "model": self.model,
            "choices": choices,
            "usage": self.usage.to_dict(),
        }


@dataclass(frozen=True, eq=False)
class EmbeddingVector:
    """Read-only unit-length embedding."""

    values: np.ndarray

    def __post_init__(self) -> None:
        values = np.array(self.values, dtype=np.float64)
        values.setflags(write=False)
        object.__setattr__(self, "values", values)

    def __len__(self) -> int:
        return int(self.values.shape[0])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EmbeddingVector):
            return NotImplemented
        return bool(np.array_equal(self.values, other.values))

    def __hash__(self) -> int:
        return hash(self.values.tobytes())

    def norm(self) -> float:
        return float(np.linalg.norm(self.values))

    def tolist(self) -> List[float]:
        return self.values.tolist()

    def to_base64(self) -> str:
        """Little-endian float32 bytes, base64 encoded."""
        return base64.b64encode(self.values.astype("<f4").tobytes()).decode("ascii")


@dataclass(frozen=True)
class EmbeddingData:
    """One embedded input within an embedding response."""

    index: int
    vector: EmbeddingVector

    def to_dict(self, encoding_format: str = "float") -> Dict[str, Any]:
        embedding: Any
        if encoding_format == "base64":
            embedding = self.vector.to_base64()
        else:
            embedding = self.vector.tolist()
        return {"object": "embedding", "embedding": embedding, "index": self.index}


@dataclass(frozen=True)
class EmbeddingResponse:
    """Result returned from an embedding request."""

    data: Tuple[EmbeddingData, ...]
    model: str
    usage: UsageRecord
    encoding_format: str = "float"
    object: ResponseKind = ResponseKind.LIST

    @property
    def embeddings(self) -> List[List[float]]:
        return [item.vector.tolist() for item in self.data]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "object": self.object.value,
            "data": [item.to_dict(self.encoding_format) for item in self.data],
            "model": self.model,
            "usage": self.usage.to_dict(),
        }
