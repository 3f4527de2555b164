"""Client interfaces and the synthetic implementation."""

from .base import EmbeddingClient, LLMClient, SynthesisClient
from .synthetic import SyntheticClient

__all__ = ["LLMClient", "EmbeddingClient", "SynthesisClient", "SyntheticClient"]
