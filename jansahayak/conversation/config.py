"""
Dialogue orchestration policy.
"""

from dataclasses import dataclass, field
from datetime import timedelta

from ..llm import RetryPolicy
from ..models import Language


@dataclass
class OrchestratorConfig:
    """Timeouts, windows and bounds for the dialogue orchestrator."""
    # Session lifetime after the last activity
    inactivity_window_seconds: float = 1800.0

    # Turns passed to generation (M) and kept in the session (N)
    history_window: int = 5
    stored_history: int = 20

    max_recent_schemes: int = 5
    max_clarification_rounds: int = 2

    # Below this detection confidence the session's language is kept
    language_confidence_threshold: float = 0.6
    default_language: Language = Language.EN

    # Per-call timeouts (seconds)
    store_timeout: float = 2.0
    retrieval_timeout: float = 8.0
    generation_timeout: float = 15.0
    extraction_timeout: float = 15.0

    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)

    # Transcripts below this confidence get a repeat prompt
    transcription_confidence_threshold: float = 0.5

    # Speech segmentation
    max_spoken_seconds: float = 12.0
    words_per_second: float = 2.5

    def __post_init__(self):
        if self.history_window > self.stored_history:
            raise ValueError("history_window must not exceed stored_history")
        if self.max_clarification_rounds < 0:
            raise ValueError("max_clarification_rounds must be >= 0")

    @property
    def inactivity_window(self) -> timedelta:
        return timedelta(seconds=self.inactivity_window_seconds)
