"""
Versioned knowledge store with a FAISS vector index.

Scheme documents are append-only per scheme id: a new version must be
strictly greater than the current one and stored versions never change.
Chunks of old versions stay in the index for audit but are never offered
as search candidates.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Iterable, Optional

import faiss
import numpy as np

from ..errors import NotFoundError, ValidationError
from ..models import Chunk, Language, SchemeDocument

logger = logging.getLogger(__name__)

INDEX_FILE = "chunks.faiss"
METADATA_FILE = "metadata.json"


class KnowledgeStore:
    """Scheme documents plus chunk vectors in a FAISS inner-product index."""

    def __init__(self, embedding_dim: int = 384):
        """Initialize an empty store.

        Args:
            embedding_dim: Dimension shared by every chunk and query vector
        """
        self.embedding_dim = embedding_dim
        # Using IndexFlatIP for inner product (cosine similarity with normalized vectors)
        self.index = faiss.IndexFlatIP(embedding_dim)
        self.chunks: list[Chunk] = []  # row i of the index is chunks[i]
        self._documents: dict[str, dict[int, SchemeDocument]] = {}
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def put_document(self, doc: SchemeDocument) -> None:
        """Append a new scheme version without chunks."""
        self.put_version(doc, [])

    def put_version(self, doc: SchemeDocument, chunks: Iterable[Chunk]) -> int:
        """Append a new scheme version together with its embedded chunks.

        Everything is validated before anything is written, so a failure
        leaves the previous version current and searchable.

        Returns:
            Number of chunks added.
        """
        chunks = list(chunks)
        for chunk in chunks:
            if (chunk.scheme_id, chunk.scheme_version) != (doc.scheme_id, doc.version):
                raise ValidationError(f"Chunk {chunk.chunk_id} does not belong to {doc.scheme_id} v{doc.version}")
        matrix = self._chunk_matrix(chunks)

        with self._lock:
            current = self.current_version(doc.scheme_id) or 0
            if doc.version <= current:
                raise ValidationError(
                    f"Scheme {doc.scheme_id} version {doc.version} is not newer than stored version {current}"
                )
            self._documents.setdefault(doc.scheme_id, {})[doc.version] = doc
            if chunks:
                self.index.add(matrix)
                self.chunks.extend(chunks)
        logger.info(f"Stored scheme {doc.scheme_id} v{doc.version} with {len(chunks)} chunks")
        return len(chunks)

    def get_document(self, scheme_id: str, version: Optional[int] = None) -> SchemeDocument:
        """Return the current (or a specific) version of a scheme."""
        with self._lock:
            versions = self._documents.get(scheme_id)
            if not versions:
                raise NotFoundError("scheme", scheme_id)
            key = max(versions) if version is None else version
            if key not in versions:
                raise NotFoundError("scheme version", f"{scheme_id}@v{version}")
            return versions[key]

    def current_version(self, scheme_id: str) -> Optional[int]:
        with self._lock:
            versions = self._documents.get(scheme_id)
            return max(versions) if versions else None

    def list_schemes(self) -> list[SchemeDocument]:
        """Current version of every scheme."""
        with self._lock:
            return [versions[max(versions)] for versions in self._documents.values() if versions]

    # ------------------------------------------------------------------
    # Chunks
    # ------------------------------------------------------------------

    def add_chunks(self, chunks: Iterable[Chunk]) -> int:
        """Add embedded chunks of already stored versions. Returns the number added."""
        chunks = list(chunks)
        if not chunks:
            return 0

        matrix = self._chunk_matrix(chunks)
        with self._lock:
            for chunk in chunks:
                if chunk.scheme_version not in self._documents.get(chunk.scheme_id, {}):
                    raise NotFoundError("scheme version", f"{chunk.scheme_id}@v{chunk.scheme_version}")
            self.index.add(matrix)
            self.chunks.extend(chunks)
        return len(chunks)

    def _chunk_matrix(self, chunks: list[Chunk]) -> np.ndarray:
        """Normalized embedding matrix; every chunk must carry a vector of the store's dimension."""
        vectors = []
        for chunk in chunks:
            if chunk.embedding is None:
                raise ValidationError(f"Chunk {chunk.chunk_id} has no embedding")
            if len(chunk.embedding) != self.embedding_dim:
                raise ValidationError(
                    f"Chunk {chunk.chunk_id} has dimension {len(chunk.embedding)}, expected {self.embedding_dim}"
                )
            vectors.append(chunk.embedding)
        return self._normalize(np.array(vectors, dtype=np.float32).reshape(len(vectors), self.embedding_dim))

    def candidate_rows(
        self,
        languages: Optional[set[Language]] = None,
        category: Optional[str] = None,
    ) -> list[int]:
        """Rows of current-version chunks matching the language/category filter."""
        with self._lock:
            current = {sid: max(v) for sid, v in self._documents.items() if v}
            return [
                row for row, chunk in enumerate(self.chunks)
                if current.get(chunk.scheme_id) == chunk.scheme_version
                and (languages is None or chunk.language in languages)
                and (category is None or chunk.category == category)
            ]

    def vector_scores(self, query_embedding: np.ndarray, rows: list[int]) -> dict[int, float]:
        """Cosine similarity between the query and each of `rows`."""
        if not rows:
            return {}
        query = np.asarray(query_embedding, dtype=np.float32).reshape(1, -1)
        if query.shape[1] != self.embedding_dim:
            raise ValidationError(
                f"Query embedding has dimension {query.shape[1]}, expected {self.embedding_dim}"
            )
        query = self._normalize(query)

        with self._lock:
            total = self.index.ntotal
            if total == 0:
                return {}
            scores, indices = self.index.search(query, total)

        wanted = set(rows)
        return {
            int(idx): float(score)
            for score, idx in zip(scores[0], indices[0])
            if idx >= 0 and int(idx) in wanted
        }

    def chunk_at(self, row: int) -> Chunk:
        with self._lock:
            return self.chunks[row]

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, directory: str | Path) -> None:
        """Write the FAISS index and JSON metadata to `directory`."""
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        with self._lock:
            faiss.write_index(self.index, str(directory / INDEX_FILE))
            metadata = {
                "embedding_dim": self.embedding_dim,
                "documents": [
                    doc.model_dump(mode="json")
                    for versions in self._documents.values()
                    for _, doc in sorted(versions.items())
                ],
                "chunks": [chunk.to_dict() for chunk in self.chunks],
            }
        with open(directory / METADATA_FILE, "w", encoding="utf-8") as f:
            json.dump(metadata, f, ensure_ascii=False, indent=2)
        logger.info(f"Saved knowledge store to {directory}")

    @classmethod
    def load(cls, directory: str | Path) -> "KnowledgeStore":
        directory = Path(directory)
        with open(directory / METADATA_FILE, "r", encoding="utf-8") as f:
            metadata = json.load(f)

        store = cls(embedding_dim=int(metadata["embedding_dim"]))
        store.index = faiss.read_index(str(directory / INDEX_FILE))
        for raw in metadata["documents"]:
            doc = SchemeDocument.model_validate(raw)
            store._documents.setdefault(doc.scheme_id, {})[doc.version] = doc
        store.chunks = [Chunk.from_dict(c) for c in metadata["chunks"]]

        if store.index.ntotal != len(store.chunks):
            raise ValidationError(
                f"Index has {store.index.ntotal} vectors but metadata lists {len(store.chunks)} chunks"
            )
        logger.info(f"Loaded knowledge store from {directory}: {len(store.chunks)} chunks")
        return store

    def get_stats(self) -> dict:
        with self._lock:
            current_rows = self.candidate_rows()
            by_language: dict[str, int] = {}
            for row in current_rows:
                lang = self.chunks[row].language.value
                by_language[lang] = by_language.get(lang, 0) + 1
            return {
                "schemes": len(self._documents),
                "versions": sum(len(v) for v in self._documents.values()),
                "chunks": len(self.chunks),
                "current_chunks": len(current_rows),
                "chunks_by_language": by_language,
                "embedding_dim": self.embedding_dim,
            }

    @staticmethod
    def _normalize(matrix: np.ndarray) -> np.ndarray:
        norms = np.linalg.norm(matrix, axis=1, keepdims=True)
        norms[norms == 0] = 1.0
        return matrix / norms
