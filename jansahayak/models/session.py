"""
Conversation session models.

A Session is owned by the dialogue orchestrator; session stores only persist
and retrieve it. Slots are a closed set of typed fields per topic and are
validated on every assignment.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .issue import IssueType, Severity
from .language import Language
from .scheme import UserProfile


class Topic(str, Enum):
    SCHEME_DISCOVERY = "scheme_discovery"
    ISSUE_REPORTING = "issue_reporting"
    ISSUE_TRACKING = "issue_tracking"
    GENERAL = "general"


class DialogueState(str, Enum):
    NEW = "new"
    ACTIVE = "active"
    AWAITING_CLARIFICATION = "awaiting_clarification"
    TERMINATED = "terminated"


class SchemeSlots(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    category: Optional[str] = None
    last_query: Optional[str] = None
    focus_scheme_id: Optional[str] = None
    profile: UserProfile = Field(default_factory=UserProfile)


class IssueSlots(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    issue_type: Optional[IssueType] = None
    description: str = ""
    address: str = ""
    landmark: Optional[str] = None
    city: str = ""
    state: str = ""
    severity: Severity = Severity.MEDIUM


class TrackingSlots(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    tracking_id: Optional[str] = None


class ConversationSlots(BaseModel):
    """All typed slots of a session, grouped by topic."""
    model_config = ConfigDict(validate_assignment=True)

    scheme: SchemeSlots = Field(default_factory=SchemeSlots)
    issue: IssueSlots = Field(default_factory=IssueSlots)
    tracking: TrackingSlots = Field(default_factory=TrackingSlots)


class ClarificationRequest(BaseModel):
    """A question the orchestrator is waiting on the citizen to answer."""
    topic: Topic
    slot: str
    question: str


class Turn(BaseModel):
    role: Literal["user", "assistant"]
    text: str
    language: Language
    timestamp: datetime


class Session(BaseModel):
    """Durable, TTL-bound record of one citizen's conversation."""
    model_config = ConfigDict(validate_assignment=True)

    session_id: str
    language: Language = Language.EN
    state: DialogueState = DialogueState.NEW
    topic: Topic = Topic.GENERAL
    slots: ConversationSlots = Field(default_factory=ConversationSlots)
    recent_schemes: list[str] = Field(default_factory=list)
    pending_clarifications: list[ClarificationRequest] = Field(default_factory=list)
    clarification_rounds: int = Field(0, ge=0)
    history: list[Turn] = Field(default_factory=list)
    created_at: datetime
    last_active_at: datetime
    expires_at: datetime
    revision: int = 0

    @classmethod
    def start(cls, session_id: str, now: datetime, inactivity_window: timedelta,
              language: Language = Language.EN) -> "Session":
        return cls(
            session_id=session_id,
            language=language,
            created_at=now,
            last_active_at=now,
            expires_at=now + inactivity_window,
        )

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def terminate(self) -> None:
        """Close an expired session for good; it is replaced, never resumed."""
        self.state = DialogueState.TERMINATED

    def touch(self, now: datetime, inactivity_window: timedelta) -> None:
        """Record activity; expiry always trails last activity by the window."""
        if self.state is DialogueState.TERMINATED:
            raise ValueError(f"Session {self.session_id} is terminated")
        self.last_active_at = now
        self.expires_at = now + inactivity_window

    def add_turn(self, turn: Turn, max_turns: int) -> None:
        """Append a turn, evicting the oldest beyond `max_turns` (FIFO)."""
        history = self.history + [turn]
        self.history = history[-max_turns:] if max_turns > 0 else history

    def recent_history(self, window: int) -> list[Turn]:
        return self.history[-window:] if window > 0 else []

    def remember_schemes(self, scheme_ids: list[str], limit: int) -> None:
        """Put `scheme_ids` (in rank order) at the front of recent schemes."""
        merged = list(dict.fromkeys(scheme_ids))
        merged += [s for s in self.recent_schemes if s not in merged]
        self.recent_schemes = merged[:limit]

    def clear_clarifications(self) -> None:
        self.pending_clarifications = []
        self.clarification_rounds = 0

    def reset_topic(self, topic: Topic) -> None:
        """Switch topic, dropping slots and pending questions but not history."""
        self.topic = topic
        self.slots = ConversationSlots()
        self.clear_clarifications()
        self.state = DialogueState.ACTIVE
