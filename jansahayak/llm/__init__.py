"""
External model collaborators: generation, embedding and resilient calling.
"""

from .client import (
    DEFAULT_MODELS,
    Embedder,
    GeminiEmbedder,
    GeminiGenerator,
    Generator,
    extract_json_block,
    is_transient,
)
from .resilience import RetryPolicy, call_with_resilience

__all__ = [
    "DEFAULT_MODELS",
    "Embedder",
    "GeminiEmbedder",
    "GeminiGenerator",
    "Generator",
    "extract_json_block",
    "is_transient",
    "RetryPolicy",
    "call_with_resilience",
]
