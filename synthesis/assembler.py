"""Compose classifier, renderers and usage into response envelopes."""
from __future__ import annotations

from typing import List, Union

from utils.logging import get_logger

from . import identifiers, tools
from .classifier import classify, latest_user_content
from .embeddings import embed, input_texts, resolve_dimensions
from .models import (
    ChatGenerationRequest,
    EmbeddingData,
    EmbeddingRequest,
    EmbeddingResponse,
    FinishReason,
    GenerationRequest,
    GenerationResponse,
    ResponseChoice,
    ResponseKind,
    SynthesisRequest,
)
from .text import (
    DEFAULT_COMPLETION_MAX_TOKENS,
    Surface,
    finish_reason_for,
    generate_logprobs,
    render,
)
from .tokens import (
    estimate_embedding_tokens,
    estimate_message_tokens,
    estimate_tokens,
    estimate_tokens_from_length,
)
from .usage import aggregate

logger = get_logger(__name__)


def _completion_choice(request: GenerationRequest, index: int) -> ResponseChoice:
    prompt = request.prompts[0] if request.prompts else ""
    max_tokens = request.max_tokens or DEFAULT_COMPLETION_MAX_TOKENS
    category = classify(prompt)
    text = render(category, prompt, max_tokens, echo=request.echo, surface=Surface.COMPLETION)
    logprobs = None
    if request.logprobs:
        logprobs = generate_logprobs(text, request.logprobs)
    return ResponseChoice(
        index=index,
        finish_reason=finish_reason_for(text, max_tokens, request.stop),
        text=text,
        logprobs=logprobs,
    )


def create_completion(request: GenerationRequest) -> GenerationResponse:
    """Build a ``text_completion`` envelope with ``request.n`` choices."""
    choices = tuple(_completion_choice(request, index) for index in range(request.n))
    prompt_tokens = estimate_tokens(" ".join(request.prompts))
    usage = aggregate(prompt_tokens, (estimate_tokens(choice.text or "") for choice in choices))
    logger.debug(
        "completion model=%s choices=%s prompt_tokens=%s completion_tokens=%s",
        request.model,
        len(choices),
        usage.prompt_tokens,
        usage.completion_tokens,
    )
    return GenerationResponse(
        id=identifiers.completion_id(),
        object=ResponseKind.TEXT_COMPLETION,
        created=identifiers.unix_timestamp(),
        model=request.model,
        choices=choices,
        usage=usage,
    )


def _chat_choice(request: ChatGenerationRequest, index: int) -> ResponseChoice:
    if tools.should_invoke(request.messages, request.tools, request.tool_choice):
        invocation = tools.synthesize(request.tools[0])
        return ResponseChoice(
            index=index,
            finish_reason=FinishReason.TOOL_CALLS,
            tool_calls=(invocation,),
        )

    user_content = latest_user_content(request.messages)
    category = classify(user_content, model=request.model, chat=True)
    text = render(category, user_content, request.max_tokens, surface=Surface.CHAT)
    return ResponseChoice(
        index=index,
        finish_reason=finish_reason_for(text, request.max_tokens, request.stop),
        text=text,
    )


def _chat_completion_tokens(choice: ResponseChoice) -> int:
    chars = len(choice.text or "")
    chars += sum(len(call.name) + len(call.arguments) for call in choice.tool_calls)
    return estimate_tokens_from_length(chars)


def create_chat_completion(request: ChatGenerationRequest) -> GenerationResponse:
    """Build a ``chat.completion`` envelope with ``request.n`` choices."""
    choices = tuple(_chat_choice(request, index) for index in range(request.n))
    usage = aggregate(
        estimate_message_tokens(request.messages),
        (_chat_completion_tokens(choice) for choice in choices),
    )
    logger.debug(
        "chat completion model=%s choices=%s tool_calls=%s",
        request.model,
        len(choices),
        any(choice.tool_calls for choice in choices),
    )
    return GenerationResponse(
        id=identifiers.chat_completion_id(),
        object=ResponseKind.CHAT_COMPLETION,
        created=identifiers.unix_timestamp(),
        model=request.model,
        choices=choices,
        usage=usage,
    )


def create_embedding(request: EmbeddingRequest) -> EmbeddingResponse:
    """Embed every input record; usage has no completion side."""
    texts = input_texts(request.input)
    dimensions = resolve_dimensions(request.model, request.dimensions)
    data: List[EmbeddingData] = [
        EmbeddingData(index=index, vector=embed(text, dimensions))
        for index, text in enumerate(texts)
    ]
    usage = aggregate(estimate_embedding_tokens(" ".join(texts)))
    logger.debug(
        "embedding model=%s inputs=%s dimensions=%s", request.model, len(data), dimensions
    )
    return EmbeddingResponse(
        data=tuple(data),
        model=request.model,
        usage=usage,
        encoding_format=request.encoding_format,
    )


def synthesize(request: SynthesisRequest) -> Union[GenerationResponse, EmbeddingResponse]:
    """Dispatch ``request`` to the builder for its kind."""
    if isinstance(request, GenerationRequest):
        return create_completion(request)
    if isinstance(request, ChatGenerationRequest):
        return create_chat_completion(request)
    if isinstance(request, EmbeddingRequest):
        return create_embedding(request)
    raise TypeError(f"Unsupported request type: {type(request).__name__}")


__all__ = [
    "create_chat_completion",
    "create_completion",
    "create_embedding",
    "synthesize",
]
