"""
Retrieval components for the Jan Sahayak engine.

This package contains:
- retriever: Hybrid vector + BM25 scheme search
- reranker: Cross-encoder re-ranking
- eligibility: Rule-based eligibility checks
- intent: Keyword and pattern detectors
- classifier: Topic classification
- responder: Grounded answer generation
"""

from .classifier import TopicClassifier, TopicIntent
from .config import RetrievalConfig, SearchContext
from .eligibility import GenerativeJudge, check_eligibility, evaluate_rule
from .reranker import CrossEncoderReranker, Reranker
from .responder import SchemeResponder
from .retriever import SchemeRetriever, tokenize

__all__ = [
    "TopicClassifier",
    "TopicIntent",
    "RetrievalConfig",
    "SearchContext",
    "GenerativeJudge",
    "check_eligibility",
    "evaluate_rule",
    "CrossEncoderReranker",
    "Reranker",
    "SchemeResponder",
    "SchemeRetriever",
    "tokenize",
]
