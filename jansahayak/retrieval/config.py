"""
Retrieval configuration.

The similarity floor and hybrid weights are policy choices, not derived
constants; tune them per embedding model.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class RetrievalConfig:
    """Configuration for hybrid scheme search."""
    # Number of results returned to the orchestrator
    top_k: int = 3

    # Minimum cosine similarity for a chunk to count as relevant
    similarity_floor: float = 0.5

    # Hybrid scoring: weighted sum of normalized vector and keyword scores
    vector_weight: float = 0.7
    keyword_weight: float = 0.3

    # How many merged candidates the re-ranker sees (must be >= top_k)
    rerank_top_n: int = 10

    # Keep only the best chunk of each scheme
    one_chunk_per_scheme: bool = True

    # Search the other language when nothing clears the floor in the query language
    allow_cross_language_fallback: bool = True

    def __post_init__(self):
        if self.rerank_top_n < self.top_k:
            raise ValueError("rerank_top_n must be >= top_k")
        if not 0.0 <= self.similarity_floor <= 1.0:
            raise ValueError("similarity_floor must be within [0, 1]")


@dataclass
class SearchContext:
    """Conversation context that narrows a search."""
    category: Optional[str] = None
