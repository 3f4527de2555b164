"""Interfaces shared by every backend able to answer OpenAI-shaped requests."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Union

from ..models import (
    ChatGenerationRequest,
    EmbeddingRequest,
    EmbeddingResponse,
    GenerationRequest,
    GenerationResponse,
    SynthesisRequest,
)


class LLMClient(ABC):
    """Produces ``text_completion`` and ``chat.completion`` envelopes."""

    @abstractmethod
    def generate(self, request: GenerationRequest) -> GenerationResponse:
        """Answer a legacy completion request."""

        raise NotImplementedError

    @abstractmethod
    def chat(self, request: ChatGenerationRequest) -> GenerationResponse:
        """Answer a chat request, possibly with tool invocations."""

        raise NotImplementedError


class EmbeddingClient(ABC):
    """Produces embedding lists."""

    @abstractmethod
    def embed(self, request: EmbeddingRequest) -> EmbeddingResponse:
        raise NotImplementedError


class SynthesisClient(LLMClient, EmbeddingClient):
    """A backend serving all three endpoints.

    ``respond`` routes a parsed request to the matching method so callers such
    as the HTTP layer need a single entry point.
    """

    def respond(self, request: SynthesisRequest) -> Union[GenerationResponse, EmbeddingResponse]:
        if isinstance(request, GenerationRequest):
            return self.generate(request)
        if isinstance(request, ChatGenerationRequest):
            return self.chat(request)
        if isinstance(request, EmbeddingRequest):
            return self.embed(request)
        raise TypeError(f"Unsupported request type: {type(request).__name__}")
