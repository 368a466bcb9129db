"""
Data models for the Jan Sahayak engine.

This package contains all data models organized by domain:
- language: Language tags and bilingual text
- scheme: Scheme documents, eligibility, chunks and search hits
- issue: Civic issue reports and their status lifecycle
- session: Conversation session, slots and turns
- response: Tagged-union turn response
"""

from .language import BilingualText, DetectedLanguage, Language

from .scheme import (
    Chunk,
    EligibilityCriterion,
    EligibilityResult,
    EligibilityRule,
    RetrievalResult,
    RuleOperator,
    SchemeDocument,
    SearchHit,
    SectionKind,
    UserProfile,
)

from .issue import (
    ALLOWED_TRANSITIONS,
    REQUIRED_ISSUE_FIELDS,
    FollowUpComment,
    IssueDetails,
    IssueReport,
    IssueStatus,
    IssueType,
    Location,
    Severity,
    StatusHistoryEntry,
)

from .session import (
    ClarificationRequest,
    ConversationSlots,
    DialogueState,
    IssueSlots,
    SchemeSlots,
    Session,
    Topic,
    TrackingSlots,
    Turn,
)

from .response import (
    EligibilityData,
    IssueReportData,
    Response,
    SchemeMatch,
    SchemeResultSet,
)

__all__ = [
    # Language
    "BilingualText",
    "DetectedLanguage",
    "Language",
    # Schemes
    "Chunk",
    "EligibilityCriterion",
    "EligibilityResult",
    "EligibilityRule",
    "RetrievalResult",
    "RuleOperator",
    "SchemeDocument",
    "SearchHit",
    "SectionKind",
    "UserProfile",
    # Issues
    "ALLOWED_TRANSITIONS",
    "REQUIRED_ISSUE_FIELDS",
    "FollowUpComment",
    "IssueDetails",
    "IssueReport",
    "IssueStatus",
    "IssueType",
    "Location",
    "Severity",
    "StatusHistoryEntry",
    # Sessions
    "ClarificationRequest",
    "ConversationSlots",
    "DialogueState",
    "IssueSlots",
    "SchemeSlots",
    "Session",
    "Topic",
    "TrackingSlots",
    "Turn",
    # Responses
    "EligibilityData",
    "IssueReportData",
    "Response",
    "SchemeMatch",
    "SchemeResultSet",
]
