"""Deterministic embedding vectors derived from a string hash.

The same text and dimensionality always yield the same unit vector, in every
process, on every platform. The arithmetic below is fixed: changing any step
(including the order of operations) changes every vector.
"""
from __future__ import annotations

import math
from types import MappingProxyType
from typing import List, Mapping, Optional

import numpy as np

from .models import EmbeddingInput, EmbeddingVector

HASH_SEED = 5381
HASH_MULTIPLIER = 33
LCG_MULTIPLIER = 1103515245
LCG_INCREMENT = 12345
LCG_MODULUS = 1 << 31
_U64_MASK = (1 << 64) - 1

DEFAULT_DIMENSIONS = 1536

MODEL_DIMENSIONS: Mapping[str, int] = MappingProxyType(
    {
        "text-embedding-ada-002": 1536,
        "text-embedding-3-small": 1536,
        "text-embedding-3-large": 3072,
        "text-similarity-ada-001": 1024,
        "text-similarity-babbage-001": 2048,
        "text-similarity-curie-001": 4096,
        "text-similarity-davinci-001": 12288,
    }
)


def resolve_dimensions(model: str, dimensions: Optional[int] = None) -> int:
    """An explicit ``dimensions`` wins over the model's default width."""
    if dimensions is not None:
        return dimensions
    return MODEL_DIMENSIONS.get(model, DEFAULT_DIMENSIONS)


def hash_string(text: str) -> int:
    """djb2-style multiplicative hash over UTF-8 bytes, wrapping at 64 bits."""
    value = HASH_SEED
    for byte in text.encode("utf-8"):
        value = (value * HASH_MULTIPLIER + byte) & _U64_MASK
    return value


def next_state(state: int, index: int) -> int:
    return (state * LCG_MULTIPLIER + LCG_INCREMENT + index) % LCG_MODULUS


def _components(seed: int, dimensions: int) -> List[float]:
    values = []
    state = seed
    for index in range(dimensions):
        state = next_state(state, index)
        raw = state / LCG_MODULUS
        normalized = (raw - 0.5) * 2.0
        # Damping pulls magnitudes toward zero.
        values.append(normalized * (0.3 + 0.7 * (1.0 - abs(raw))))
    return values


def embed(text: str, dimensions: int) -> EmbeddingVector:
    """Expand ``text`` into a unit vector of length ``dimensions``."""
    values = _components(hash_string(text), dimensions)
    # Sequential sum of squares; a pairwise reduction would drift in the last bits.
    magnitude = math.sqrt(sum(value * value for value in values))
    vector = np.asarray(values, dtype=np.float64)
    if magnitude > 0.0:
        vector = vector / magnitude
    return EmbeddingVector(vector)


def input_texts(value: EmbeddingInput) -> List[str]:
    """Textual records to embed, one per input item.

    A flat integer list is a single record rendered as ``[1, 2, 3]``; a list of
    integer lists yields one record per inner list.
    """
    if isinstance(value, str):
        return [value]
    items = list(value)
    if items and all(isinstance(item, int) and not isinstance(item, bool) for item in items):
        return [_render_ints(items)]
    records = []
    for item in items:
        if isinstance(item, str):
            records.append(item)
        else:
            records.append(_render_ints(item))
    return records


def _render_ints(values) -> str:
    return "[" + ", ".join(str(int(value)) for value in values) + "]"
