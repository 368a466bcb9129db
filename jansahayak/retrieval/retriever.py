"""
Hybrid scheme retrieval: dense vectors (FAISS) merged with BM25 keyword scores.

Pipeline:
1. Embed the query
2. Restrict candidates to current-version chunks in the query language
   (and the conversation's category, when known)
3. Drop chunks whose cosine similarity is below the floor
4. Score the survivors with BM25 and merge: w_v * vector + w_k * keyword
5. Keep the best chunk per scheme, optionally re-rank, truncate to top-K
6. Nothing found in the query language: retry in the other language and flag it
"""

import logging
import re
from datetime import datetime, timezone
from typing import Optional

import numpy as np
from rank_bm25 import BM25Okapi

from ..indexing import KnowledgeStore
from ..llm import Embedder, Generator
from ..models import (
    EligibilityResult,
    Language,
    RetrievalResult,
    SchemeDocument,
    SearchHit,
    UserProfile,
)
from .config import RetrievalConfig, SearchContext
from .eligibility import GenerativeJudge, check_eligibility
from .reranker import Reranker

logger = logging.getLogger(__name__)

# \w misses Devanagari vowel signs, so the block is kept explicitly (minus the dandas)
_TOKEN_PATTERN = re.compile(r"[^\w\s\u0900-\u0963\u0966-\u097F]+")
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def tokenize(text: str) -> list[str]:
    """Lowercase, strip punctuation (keeping Devanagari marks), split on whitespace."""
    return _TOKEN_PATTERN.sub(" ", text.lower()).split()


def _verified_key(hit: SearchHit) -> float:
    verified = hit.verified_at or _EPOCH
    if verified.tzinfo is None:
        verified = verified.replace(tzinfo=timezone.utc)
    return verified.timestamp()


class SchemeRetriever:
    """Semantic + keyword search over the knowledge store."""

    def __init__(
        self,
        store: KnowledgeStore,
        embedder: Embedder,
        config: Optional[RetrievalConfig] = None,
        reranker: Optional[Reranker] = None,
        generator: Optional[Generator] = None,
    ):
        self.store = store
        self.embedder = embedder
        self.config = config or RetrievalConfig()
        self.reranker = reranker
        self.generator = generator

    def search(
        self,
        query_text: str,
        language: Optional[Language] = None,
        context: Optional[SearchContext] = None,
    ) -> RetrievalResult:
        """Return at most top_k hits, one per scheme, ordered by score descending.

        `language=None` searches both languages (mixed-language input).
        """
        category = context.category if context else None
        result = RetrievalResult(query=query_text, language=language, category=category)
        if not query_text.strip():
            return result

        query_embedding = self.embedder.embed(query_text)
        languages = {language} if language is not None else None
        result.hits = self._search_languages(query_text, query_embedding, languages, category)

        if not result.hits and language is not None and self.config.allow_cross_language_fallback:
            result.hits = self._search_languages(query_text, query_embedding, {language.other}, category)
            result.cross_language = bool(result.hits)
            if result.cross_language:
                logger.info(f"No {language.value} match for '{query_text[:50]}', using {language.other.value} content")

        logger.debug(f"Search '{query_text[:50]}' -> {[h.scheme_id for h in result.hits]}")
        return result

    def _search_languages(
        self,
        query_text: str,
        query_embedding: np.ndarray,
        languages: Optional[set[Language]],
        category: Optional[str],
    ) -> list[SearchHit]:
        rows = self.store.candidate_rows(languages=languages, category=category)
        vector_scores = self.store.vector_scores(query_embedding, rows)

        floor = self.config.similarity_floor
        relevant = [row for row in rows if vector_scores.get(row, -1.0) >= floor]
        if not relevant:
            return []

        keyword_scores = self._keyword_scores(query_text, relevant)

        hits = []
        for row in relevant:
            chunk = self.store.chunk_at(row)
            vector_score = min(max(vector_scores[row], 0.0), 1.0)
            keyword_score = keyword_scores.get(row, 0.0)
            score = self.config.vector_weight * vector_score + self.config.keyword_weight * keyword_score
            doc = self.store.get_document(chunk.scheme_id, chunk.scheme_version)
            hits.append(SearchHit(
                chunk=chunk,
                score=score,
                vector_score=vector_score,
                keyword_score=keyword_score,
                verified_at=doc.verified_at,
            ))

        # Ties go to the more recently verified scheme
        hits.sort(key=lambda h: (-h.score, -_verified_key(h)))

        if self.config.one_chunk_per_scheme:
            seen: set[str] = set()
            unique = []
            for hit in hits:
                if hit.scheme_id not in seen:
                    seen.add(hit.scheme_id)
                    unique.append(hit)
            hits = unique

        if self.reranker is not None:
            hits = self._rerank(query_text, hits)

        return hits[: self.config.top_k]

    def _keyword_scores(self, query_text: str, rows: list[int]) -> dict[int, float]:
        """BM25 over the candidate rows, max-normalized into [0, 1]."""
        corpus = [tokenize(self.store.chunk_at(row).text) for row in rows]
        query_tokens = tokenize(query_text)
        if not query_tokens or not any(corpus):
            return {}

        bm25 = BM25Okapi(corpus)
        raw = np.clip(bm25.get_scores(query_tokens), 0.0, None)
        top = float(raw.max()) if len(raw) else 0.0
        if top <= 0.0:
            return {}
        return {row: float(score) / top for row, score in zip(rows, raw)}

    def _rerank(self, query_text: str, hits: list[SearchHit]) -> list[SearchHit]:
        head = hits[: self.config.rerank_top_n]
        tail = hits[self.config.rerank_top_n:]
        scores = self.reranker.score(query_text, [h.chunk.text for h in head])
        for hit, rerank_score in zip(head, scores):
            hit.rerank_score = rerank_score
        head.sort(key=lambda h: (-(h.rerank_score or 0.0), -h.score))
        return head + tail

    def get_document(self, scheme_id: str) -> SchemeDocument:
        """Current version of a scheme; raises NotFoundError."""
        return self.store.get_document(scheme_id)

    def check_eligibility(
        self,
        scheme_id: str,
        profile: UserProfile,
        language: Language = Language.EN,
    ) -> EligibilityResult:
        """Evaluate `profile` against the current version of `scheme_id`."""
        doc = self.get_document(scheme_id)
        judge = GenerativeJudge(self.generator) if self.generator is not None else None
        return check_eligibility(doc, profile, judge=judge, language=language)
