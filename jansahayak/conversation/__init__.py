"""
Conversation engine: language detection, sessions and dialogue orchestration.
"""

from .config import OrchestratorConfig
from .language import LanguageDetection, LanguageDetector, choose_response_language
from .orchestrator import DialogueOrchestrator, Transcript
from .session_store import InMemorySessionStore, SessionStore
from .speech import segment_for_speech

__all__ = [
    "OrchestratorConfig",
    "LanguageDetection",
    "LanguageDetector",
    "choose_response_language",
    "DialogueOrchestrator",
    "Transcript",
    "InMemorySessionStore",
    "SessionStore",
    "segment_for_speech",
]
