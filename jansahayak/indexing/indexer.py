"""
Ingestion of curated scheme documents into the knowledge store.
"""

import json
import logging
from pathlib import Path
from typing import Iterable

from ..llm import Embedder
from ..models import SchemeDocument
from .chunker import SchemeChunker
from .store import KnowledgeStore

logger = logging.getLogger(__name__)


def load_schemes_file(path: str | Path) -> list[SchemeDocument]:
    """Read a JSON list of scheme documents."""
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    if isinstance(raw, dict):
        raw = raw.get("schemes", [])
    return [SchemeDocument.model_validate(item) for item in raw]


class SchemeIndexer:
    """Store a new scheme version and regenerate its chunks."""

    def __init__(self, store: KnowledgeStore, embedder: Embedder, chunker: SchemeChunker | None = None):
        self.store = store
        self.embedder = embedder
        self.chunker = chunker or SchemeChunker()

    def index(self, doc: SchemeDocument) -> int:
        """Index one scheme version. Returns the number of chunks created.

        Chunks are embedded before the version is stored; if embedding fails
        the store still serves the previous version.
        """
        chunks = self.chunker.chunk(doc)
        for chunk in chunks:
            chunk.embedding = [float(x) for x in self.embedder.embed(chunk.text)]
        added = self.store.put_version(doc, chunks)
        logger.info(f"Indexed {doc.scheme_id} v{doc.version}: {added} chunks")
        return added

    def index_all(self, docs: Iterable[SchemeDocument]) -> int:
        return sum(self.index(doc) for doc in docs)
