"""
Indexing and storage components for the Jan Sahayak engine.

This package contains:
- chunker: Scheme document chunker
- embedder: Sentence-transformers embedding generator
- store: Versioned FAISS knowledge store
- indexer: Ingestion of scheme documents
"""

from .chunker import SchemeChunker
from .embedder import DEFAULT_EMBEDDING_MODEL, SentenceTransformerEmbedder
from .indexer import SchemeIndexer, load_schemes_file
from .store import KnowledgeStore

__all__ = [
    "SchemeChunker",
    "DEFAULT_EMBEDDING_MODEL",
    "SentenceTransformerEmbedder",
    "SchemeIndexer",
    "load_schemes_file",
    "KnowledgeStore",
]
