"""
Dependency injection for FastAPI.

Provides singleton knowledge store, retriever, issue tracker, session store
and orchestrator instances.
"""

import logging
from typing import Optional

from ..conversation import DialogueOrchestrator, InMemorySessionStore, OrchestratorConfig
from ..indexing import KnowledgeStore, SchemeIndexer, SentenceTransformerEmbedder, load_schemes_file
from ..indexing.store import METADATA_FILE
from ..issues import IssueTracker
from ..llm import Embedder, GeminiEmbedder, GeminiGenerator, Generator
from ..retrieval import CrossEncoderReranker, RetrievalConfig, SchemeRetriever
from .config import Settings, get_settings

logger = logging.getLogger(__name__)

# Global singleton instances
_generator: Optional[Generator] = None
_retriever: Optional[SchemeRetriever] = None
_issue_tracker: Optional[IssueTracker] = None
_orchestrator: Optional[DialogueOrchestrator] = None
_is_initialized: bool = False


def _init_generator(settings: Settings) -> Optional[Generator]:
    """Gemini generator, or None when no API key is configured."""
    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY not set - generated answers disabled, using templates")
        return None
    model_ids = [m.strip() for m in settings.llm_models.split(",")] if settings.llm_models else None
    generator = GeminiGenerator(api_key=settings.gemini_api_key, model_ids=model_ids)
    logger.info("Gemini generator initialized")
    return generator


def _init_embedder(settings: Settings) -> Embedder:
    if settings.embedding_backend == "gemini":
        return GeminiEmbedder(api_key=settings.gemini_api_key)
    return SentenceTransformerEmbedder(model_name=settings.embedding_model)


def _init_store(settings: Settings, embedder: Embedder) -> KnowledgeStore:
    """Load the saved index, or build one from the schemes file."""
    if (settings.index_dir / METADATA_FILE).exists():
        store = KnowledgeStore.load(settings.index_dir)
        if store.embedding_dim != embedder.embedding_dim:
            raise ValueError(
                f"Index at {settings.index_dir} has dimension {store.embedding_dim}, "
                f"embedder produces {embedder.embedding_dim}; re-run ingestion"
            )
        return store

    store = KnowledgeStore(embedding_dim=embedder.embedding_dim)
    if settings.schemes_file.exists():
        logger.info(f"No saved index, ingesting {settings.schemes_file}")
        SchemeIndexer(store, embedder).index_all(load_schemes_file(settings.schemes_file))
    else:
        logger.warning(f"No index and no schemes file at {settings.schemes_file} - knowledge base is empty")
    return store


def _init_engine():
    """Initialize the conversation engine (singleton)."""
    global _generator, _retriever, _issue_tracker, _orchestrator, _is_initialized

    if _is_initialized:
        return _orchestrator

    settings = get_settings()
    logger.info("Loading conversation engine...")
    logger.info(f"  Index dir: {settings.index_dir}")
    logger.info(f"  Embedding: {settings.embedding_backend} / {settings.embedding_model}")

    _generator = _init_generator(settings)
    embedder = _init_embedder(settings)
    store = _init_store(settings, embedder)

    _retriever = SchemeRetriever(
        store,
        embedder,
        config=RetrievalConfig(top_k=settings.top_k, similarity_floor=settings.similarity_floor),
        reranker=CrossEncoderReranker() if settings.use_reranker else None,
        generator=_generator,
    )
    _issue_tracker = IssueTracker()
    config = OrchestratorConfig(
        inactivity_window_seconds=settings.session_ttl_seconds,
        default_language=settings.default_language,
    )
    _orchestrator = DialogueOrchestrator(
        _retriever,
        InMemorySessionStore(max_sessions=settings.max_sessions),
        _issue_tracker,
        generator=_generator,
        config=config,
    )
    _is_initialized = True

    logger.info("Conversation engine loaded successfully")
    return _orchestrator


def get_orchestrator() -> DialogueOrchestrator:
    """
    Get the singleton dialogue orchestrator.

    This is the main dependency for API endpoints.
    The knowledge store is loaded once on first call.
    """
    if _orchestrator is None:
        _init_engine()

    assert _orchestrator is not None, "Conversation engine failed to initialize"
    return _orchestrator


def get_retriever() -> SchemeRetriever:
    if _retriever is None:
        _init_engine()
    assert _retriever is not None
    return _retriever


def get_issue_tracker() -> IssueTracker:
    if _issue_tracker is None:
        _init_engine()
    assert _issue_tracker is not None
    return _issue_tracker


def is_initialized() -> bool:
    return _is_initialized


def is_llm_available() -> bool:
    """Check if the generation collaborator is configured."""
    return _generator is not None


def startup_load():
    """
    Pre-load the engine on server startup.

    Call this in FastAPI's lifespan so the embedding model and index are
    ready before handling requests.
    """
    logger.info("Pre-loading conversation engine on startup...")
    _init_engine()
    logger.info("Startup complete")
