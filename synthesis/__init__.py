"""Deterministic synthesis engine public interfaces."""

from .assembler import create_chat_completion, create_completion, create_embedding, synthesize
from .classifier import Category, classify
from .clients import EmbeddingClient, LLMClient, SynthesisClient, SyntheticClient
from .embeddings import embed, resolve_dimensions
from .models import (
    ChatGenerationRequest,
    CompletionLogprobs,
    EmbeddingData,
    EmbeddingRequest,
    EmbeddingResponse,
    EmbeddingVector,
    FinishReason,
    GenerationRequest,
    GenerationResponse,
    Message,
    ResponseChoice,
    ResponseKind,
    ToolDeclaration,
    ToolInvocation,
    UsageRecord,
)

__all__ = [
    "Category",
    "ChatGenerationRequest",
    "CompletionLogprobs",
    "EmbeddingClient",
    "EmbeddingData",
    "EmbeddingRequest",
    "EmbeddingResponse",
    "EmbeddingVector",
    "FinishReason",
    "GenerationRequest",
    "GenerationResponse",
    "LLMClient",
    "Message",
    "ResponseChoice",
    "ResponseKind",
    "SynthesisClient",
    "SyntheticClient",
    "ToolDeclaration",
    "ToolInvocation",
    "UsageRecord",
    "classify",
    "create_chat_completion",
    "create_completion",
    "create_embedding",
    "embed",
    "resolve_dimensions",
    "synthesize",
]
