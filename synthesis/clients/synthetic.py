"""In-process client backed by the synthesis engine."""
from __future__ import annotations

from typing import List

from utils.logging import get_logger

from .. import assembler
from ..models import (
    ChatGenerationRequest,
    EmbeddingRequest,
    EmbeddingResponse,
    GenerationRequest,
    GenerationResponse,
)
from .base import SynthesisClient

logger = get_logger(__name__)


class SyntheticClient(SynthesisClient):
    """Answer every request with synthesized content, no network involved.

    ``history`` keeps the requests seen so far when ``record`` is set, which
    lets tests assert on what the code under test sent.
    """

    def __init__(self, *, record: bool = False) -> None:
        self.record = record
        self.history: List[object] = []

    def _remember(self, request: object) -> None:
        if self.record:
            self.history.append(request)

    def generate(self, request: GenerationRequest) -> GenerationResponse:
        self._remember(request)
        response = assembler.create_completion(request)
        logger.info("Synthesized completion %s for model=%s", response.id, request.model)
        return response

    def chat(self, request: ChatGenerationRequest) -> GenerationResponse:
        self._remember(request)
        response = assembler.create_chat_completion(request)
        logger.info("Synthesized chat completion %s for model=%s", response.id, request.model)
        return response

    def embed(self, request: EmbeddingRequest) -> EmbeddingResponse:
        self._remember(request)
        response = assembler.create_embedding(request)
        logger.info(
            "Synthesized %s embedding(s) for model=%s", len(response.data), request.model
        )
        return response
