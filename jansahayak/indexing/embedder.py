"""
Sentence-transformers embedder for scheme chunks and queries.

The default model is multilingual so English and Hindi text share one
vector space.
"""

import logging
from typing import Optional

import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_EMBEDDING_MODEL = "sentence-transformers/paraphrase-multilingual-MiniLM-L12-v2"


class SentenceTransformerEmbedder:
    """Generate L2-normalized embeddings with a SentenceTransformer model."""

    def __init__(self, model_name: str = DEFAULT_EMBEDDING_MODEL, device: Optional[str] = None):
        """Initialize the embedder with a sentence transformer model.

        Args:
            model_name: Name of the sentence transformer model.
                       Recommended multilingual models:
                       - "sentence-transformers/paraphrase-multilingual-MiniLM-L12-v2" (fast)
                       - "intfloat/multilingual-e5-base" (better quality)
            device: Device to use ('cpu', 'cuda', or None for auto)
        """
        from sentence_transformers import SentenceTransformer

        logger.info(f"Loading embedding model: {model_name}...")
        self.model = SentenceTransformer(model_name, device=device)
        self.embedding_dim = self.model.get_sentence_embedding_dimension()
        logger.info(f"Model loaded. Embedding dimension: {self.embedding_dim}")

    def embed(self, text: str) -> np.ndarray:
        """Generate embedding for a single text."""
        return self.model.encode(text, convert_to_numpy=True, normalize_embeddings=True)
