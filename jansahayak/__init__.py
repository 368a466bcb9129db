"""
Jan Sahayak - Bilingual Citizen Assistance Engine

A voice-first conversation engine that helps Indian citizens, in English or
Hindi, to:
    - discover government schemes and check their eligibility
    - report civic issues (potholes, garbage, water supply, ...)
    - track the status of earlier complaints

Packages:
    - models: Core data models (schemes, issues, sessions, responses)
    - llm: Generation / embedding collaborators and resilient calling
    - indexing: Chunking, embedding and the versioned FAISS knowledge store
    - retrieval: Hybrid search, eligibility, topic rules and grounded answers
    - extraction: Schema-constrained extraction of issues and profiles
    - issues: Issue report lifecycle and tracking ids
    - conversation: Language detection, sessions and the dialogue orchestrator
    - server: FastAPI HTTP wrapper
"""

__version__ = "1.0.0"
__author__ = "Jan Sahayak"

# Core models
from .models import (
    BilingualText,
    DetectedLanguage,
    IssueReport,
    IssueStatus,
    Language,
    Response,
    SchemeDocument,
    Session,
    Topic,
    UserProfile,
)

# Errors
from .errors import (
    CapacityError,
    CivicAssistError,
    ConflictError,
    DependencyError,
    NotFoundError,
    TransientDependencyError,
    ValidationError,
)

# Indexing
from .indexing import KnowledgeStore, SchemeIndexer, load_schemes_file

# Retrieval
from .retrieval import RetrievalConfig, SchemeRetriever

# Issues
from .issues import IssueTracker

# Conversation
from .conversation import (
    DialogueOrchestrator,
    InMemorySessionStore,
    OrchestratorConfig,
    Transcript,
)

__all__ = [
    # Version
    "__version__",
    # Core models
    "BilingualText",
    "DetectedLanguage",
    "IssueReport",
    "IssueStatus",
    "Language",
    "Response",
    "SchemeDocument",
    "Session",
    "Topic",
    "UserProfile",
    # Errors
    "CapacityError",
    "CivicAssistError",
    "ConflictError",
    "DependencyError",
    "NotFoundError",
    "TransientDependencyError",
    "ValidationError",
    # Indexing
    "KnowledgeStore",
    "SchemeIndexer",
    "load_schemes_file",
    # Retrieval
    "RetrievalConfig",
    "SchemeRetriever",
    # Issues
    "IssueTracker",
    # Conversation
    "DialogueOrchestrator",
    "InMemorySessionStore",
    "OrchestratorConfig",
    "Transcript",
]
