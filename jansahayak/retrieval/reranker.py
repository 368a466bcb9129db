"""
Cross-encoder re-ranking of merged search candidates.
"""

import logging
from typing import Optional, Protocol

logger = logging.getLogger(__name__)

DEFAULT_RERANK_MODEL = "cross-encoder/mmarco-mMiniLMv2-L12-H384-v1"


class Reranker(Protocol):
    """Scores (query, passage) pairs; higher is more relevant."""

    def score(self, query: str, texts: list[str]) -> list[float]: ...


class CrossEncoderReranker:
    """Multilingual cross-encoder re-ranker backed by sentence-transformers."""

    def __init__(self, model_name: str = DEFAULT_RERANK_MODEL, device: Optional[str] = None):
        self.model_name = model_name
        self.device = device
        self._model = None

    @property
    def model(self):
        if self._model is None:
            from sentence_transformers import CrossEncoder

            logger.info(f"Loading cross-encoder: {self.model_name}")
            self._model = CrossEncoder(self.model_name, device=self.device)
        return self._model

    def score(self, query: str, texts: list[str]) -> list[float]:
        if not texts:
            return []
        scores = self.model.predict([(query, text) for text in texts])
        return [float(s) for s in scores]
